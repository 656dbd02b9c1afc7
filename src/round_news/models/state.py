from typing import List, Optional

from pydantic import BaseModel, ConfigDict, computed_field

from .news import Article


class SearchState(BaseModel):
    """Snapshot of one search session as seen by a renderer.

    Snapshots are immutable; the controller publishes a new one on every
    transition with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    is_loading: bool = False
    is_loading_more: bool = False
    articles: List[Article] = []
    total_results: int = 0
    current_page: int = 1
    error_message: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_more(self) -> bool:
        return len(self.articles) < self.total_results

    @computed_field  # type: ignore[prop-decorator]
    @property
    def can_load_more(self) -> bool:
        return (
            self.has_more
            and self.error_message is None
            and not self.is_loading
            and not self.is_loading_more
        )
