import httpx
import streamlit as st

from round_news.config import settings
from round_news.logging_config import get_logger
from round_news.models.news import SortBy
from round_news.models.state import SearchState
from round_news.ui.components import (
    render_articles,
    render_footer_error,
    render_full_screen_error,
)
from round_news.ui.interaction import QueryBar, should_load_more, shows_full_screen_error


API_BASE_URL = settings.round_news_api_base_url

logger = get_logger("ui.streamlit_app")


def _post(path: str, payload: dict | None = None) -> dict | None:
    try:
        response = httpx.post(f"{API_BASE_URL}{path}", json=payload, timeout=60.0)
        if response.status_code == 404 and path.startswith("/sessions/"):
            # The API evicted this session; start a fresh one on the next run.
            logger.info("session_expired", path=path)
            st.session_state["session_id"] = None
            st.session_state.pop("state", None)
            st.rerun()
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("api_request_failed", path=path, error=str(exc))
        st.error(f"Could not reach the Round News API: {exc}")
        return None
    return response.json()


def _apply(body: dict | None) -> None:
    if body is None:
        return
    st.session_state["session_id"] = body["session_id"]
    st.session_state["state"] = body["state"]


def _ensure_session() -> str | None:
    if st.session_state.get("session_id") is None:
        _apply(_post("/sessions"))
    return st.session_state.get("session_id")


def _search(session_id: str, query: str, sort_by: SortBy) -> None:
    _apply(_post(f"/sessions/{session_id}/search", {"query": query, "sort_by": sort_by.value}))


def _on_text_change() -> None:
    bar: QueryBar = st.session_state["query_bar"]
    st.session_state["query_bar"] = bar.edit(st.session_state["query_text"])


def main() -> None:
    st.set_page_config(page_title="Round News", page_icon="📰", layout="centered")

    st.markdown(
        """
        <style>
        .rn-article-card {
            border-radius: 0.9rem;
            padding: 0.75rem 0.9rem;
            margin-bottom: 0.75rem;
            border: 1px solid rgba(128, 128, 128, 0.2);
        }
        .rn-article-image {
            width: 100%;
            border-radius: 0.6rem;
            margin-bottom: 0.5rem;
        }
        .rn-article-source {
            font-size: 0.7rem;
            text-transform: uppercase;
            letter-spacing: 0.08em;
            opacity: 0.7;
        }
        .rn-article-title {
            font-size: 1rem;
            font-weight: 600;
            margin: 0.2rem 0;
        }
        .rn-article-description {
            font-size: 0.85rem;
            opacity: 0.85;
        }
        .rn-article-link {
            font-size: 0.75rem;
            color: #4C8DF5;
            text-decoration: none;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )

    if "query_bar" not in st.session_state:
        st.session_state["query_bar"] = QueryBar()
    if "state" not in st.session_state:
        st.session_state["state"] = SearchState().model_dump(mode="json", by_alias=True)

    session_id = _ensure_session()
    if session_id is None:
        return

    with st.sidebar:
        sort_by = st.selectbox(
            "Sort by",
            list(SortBy),
            index=list(SortBy).index(SortBy.PUBLISHED_AT),
            format_func=lambda item: item.value,
        )

    bar: QueryBar = st.session_state["query_bar"]
    st.session_state["query_text"] = bar.text
    st.text_input(
        "Search",
        key="query_text",
        placeholder="Search...",
        on_change=_on_text_change,
        label_visibility="collapsed",
    )
    if st.button("Search"):
        bar, query = st.session_state["query_bar"].submit()
        st.session_state["query_bar"] = bar
        if query is not None:
            _search(session_id, query, sort_by)
            st.rerun()

    chip_columns = st.columns(len(settings.categories))
    for column, category in zip(chip_columns, settings.categories):
        selected = st.session_state["query_bar"].selected_category == category
        label = f"✓ {category}" if selected else category
        if column.button(label, key=f"chip_{category}"):
            bar = st.session_state["query_bar"].select_category(category)
            st.session_state["query_bar"] = bar
            if bar.selected_category is not None:
                _search(session_id, category, sort_by)
            st.rerun()

    state = SearchState.model_validate(st.session_state["state"])
    if state.is_loading:
        st.info("Loading...")
        return
    if shows_full_screen_error(state):
        render_full_screen_error(state.error_message or "")
        if st.button("Dismiss"):
            _apply(_post(f"/sessions/{session_id}/clear-error"))
            st.rerun()
        return

    st.caption(f"{len(state.articles)} of {state.total_results} results")
    render_articles(st.session_state["state"]["articles"])

    if state.error_message is not None:
        render_footer_error(state.error_message)
        if st.button("Retry"):
            _apply(_post(f"/sessions/{session_id}/clear-error"))
            _apply(_post(f"/sessions/{session_id}/load-more"))
            st.rerun()
    elif state.has_more and st.button("Load more"):
        # Reaching the button means the end of the list is on screen.
        if should_load_more(state, last_visible_index=len(state.articles) - 1):
            _apply(_post(f"/sessions/{session_id}/load-more"))
            st.rerun()


if __name__ == "__main__":
    main()
