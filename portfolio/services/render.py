"""
Markdown rendering for notes and learning descriptions.
"""
import markdown
from markupsafe import Markup


MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def _markdown() -> markdown.Markdown:
    """Markdown converter that escapes raw HTML instead of passing it through."""
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md


def render_markdown(text: str) -> Markup:
    """Convert note markdown to HTML safe for direct template output."""
    if not text:
        return Markup("")
    return Markup(_markdown().convert(text))


def excerpt(text: str, limit: int = 200) -> str:
    """First paragraph of plain markdown text, cut at `limit` characters."""
    first = text.strip().split("\n\n", 1)[0].strip()
    if len(first) <= limit:
        return first
    return first[:limit].rsplit(" ", 1)[0] + "…"
