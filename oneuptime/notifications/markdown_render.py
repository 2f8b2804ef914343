from enum import StrEnum

import markdown


class MarkdownContentType(StrEnum):
    EMAIL = "email"
    DOCS = "docs"


_EXTENSIONS: dict[MarkdownContentType, list[str]] = {
    MarkdownContentType.EMAIL: ["extra", "nl2br", "sane_lists"],
    MarkdownContentType.DOCS: ["extra", "toc", "sane_lists"],
}


def convert_to_html(text: str, content_type: MarkdownContentType = MarkdownContentType.EMAIL) -> str:
    if not text.strip():
        return ""
    return markdown.markdown(text, extensions=_EXTENSIONS[content_type])
