"""Markdown rendering for the invitation page and icebreaker question text.

Architecture note:
    The invitation is authored as a markdown file so the host can edit it
    without touching code, and is rendered once into a standalone page.
    Question text is entered through the admin API and echoed back to every
    guest inside the icebreaker page, so it gets a smaller parser. Raw HTML is
    disabled for both.
"""

from __future__ import annotations

from html import escape
from pathlib import Path

from markdown_it import MarkdownIt

from birthday_app.constants.about import APP_NAME, DEFAULT_INVITATION_MARKDOWN


class MarkdownRenderer:
    """Turns the invitation into a page and question text into fragments."""

    def __init__(self) -> None:
        self._invitation_markdown = MarkdownIt("commonmark", {"html": False}).enable(["table", "strikethrough"])
        self._question_markdown = MarkdownIt("commonmark", {"html": False}).disable("image")

    def render_invitation(self, markdown_text: str, title: str = APP_NAME) -> str:
        """Render the invitation markdown into a standalone page; blank text falls back to the default invitation."""
        source = markdown_text.strip() or DEFAULT_INVITATION_MARKDOWN
        return _wrap_document(self._invitation_markdown.render(source), title)

    def render_question(self, question_text: str) -> str:
        """Render one question into an HTML fragment for the icebreaker page."""
        return self._question_markdown.render(question_text.strip())


def _wrap_document(body_html: str, title: str) -> str:
    return f"""<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>{escape(title)}</title>
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <style>
      body {{ font-family: Arial, sans-serif; margin: 0; padding: 2rem; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); min-height: 100vh; }}
      .card {{ background: #fff; color: #333; border-radius: 10px; padding: 2rem; max-width: 40rem; margin: 0 auto; box-shadow: 0 10px 25px rgba(0, 0, 0, 0.2); }}
    </style>
  </head>
  <body>
    <div class=\"card\">{body_html}</div>
  </body>
</html>"""


def load_invitation_markdown(file_path: Path | None) -> str:
    if file_path is None or not file_path.exists():
        return DEFAULT_INVITATION_MARKDOWN
    return file_path.read_text(encoding="utf-8")


# Shared instance; MarkdownIt renders are read-only, so request handlers reuse it.
renderer = MarkdownRenderer()
