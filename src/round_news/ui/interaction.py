"""Renderer-side interaction rules that sit in front of the controller.

These hold no toolkit state, so any renderer (Streamlit here) can reuse them.
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..config import settings
from ..models.state import SearchState


@dataclass(frozen=True)
class QueryBar:
    """Text field plus category chips.

    A chip and a typed query are mutually exclusive: picking a chip writes
    the category into the text field, and editing or submitting the text
    deselects any chip. Picking the selected chip again deselects it and
    leaves the text alone.
    """

    text: str = ""
    selected_category: Optional[str] = None

    def edit(self, text: str) -> "QueryBar":
        return replace(self, text=text, selected_category=None)

    def select_category(self, category: str) -> "QueryBar":
        if self.selected_category == category:
            return replace(self, selected_category=None)
        return replace(self, text=category, selected_category=category)

    def submit(self) -> tuple["QueryBar", Optional[str]]:
        """Return the new bar and the query to search for, if any."""
        if not self.text.strip():
            return self, None
        return replace(self, selected_category=None), self.text


def should_load_more(
    state: SearchState,
    last_visible_index: Optional[int],
    threshold: int | None = None,
) -> bool:
    """Scroll-near-end trigger.

    Stays quiet while a page is loading or an error is shown; the error has
    to be cleared before paging resumes.
    """
    if threshold is None:
        threshold = settings.load_more_threshold
    if state.is_loading_more or state.error_message is not None:
        return False
    if last_visible_index is None:
        return False
    return last_visible_index >= len(state.articles) - threshold


def shows_full_screen_error(state: SearchState) -> bool:
    """Only an empty result set gives the whole screen to the error."""
    return not state.articles and state.error_message is not None
