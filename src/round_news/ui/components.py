import html
from datetime import datetime
from typing import Any, Iterable, Mapping

import streamlit as st


def _format_published(published_at: Any) -> str:
    if not isinstance(published_at, str) or not published_at:
        return ""
    try:
        dt = datetime.fromisoformat(published_at.replace("Z", "+00:00"))
    except ValueError:
        return published_at
    return dt.strftime("%b %d, %Y")


def _safe_url(value: Any) -> str:
    url = (value or "").strip() if isinstance(value, str) else ""
    if not url.lower().startswith(("http://", "https://")):
        return ""
    return html.escape(url, quote=True)


def render_article(article: Mapping[str, Any]) -> None:
    # Every field comes from the news API and is escaped before it reaches HTML.
    title = html.escape(article.get("title") or "Untitled")
    url = _safe_url(article.get("url"))
    source = (article.get("source") or {}).get("name") or ""
    author = article.get("author") or ""
    description = html.escape(article.get("description") or "")
    image_url = _safe_url(article.get("urlToImage"))
    published_str = _format_published(article.get("publishedAt"))

    byline = html.escape(" · ".join(part for part in (source, author, published_str) if part))

    card_html = f"""
    <div class="rn-article-card">
        {('<img src="' + image_url + '" class="rn-article-image"/>') if image_url else ''}
        <div class="rn-article-source">{byline}</div>
        <div class="rn-article-title">{title}</div>
        <div class="rn-article-description">{description}</div>
        {('<a href="' + url + '" target="_blank" class="rn-article-link">Open article</a>') if url else ''}
    </div>
    """
    st.markdown(card_html, unsafe_allow_html=True)


def render_articles(articles: Iterable[Mapping[str, Any]]) -> None:
    articles_list = list(articles)
    if not articles_list:
        st.write("No articles yet.")
        return

    for article in articles_list:
        render_article(article)


def render_full_screen_error(message: str) -> None:
    st.error(message)


def render_footer_error(message: str) -> None:
    st.warning(f"Failed to load more: {message}")
