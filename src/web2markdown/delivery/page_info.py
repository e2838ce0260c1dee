"""Source attribution footer."""


def append_page_info(markdown: str, title: str, url: str) -> str:
    """Append a ``**Source:** [title](url)`` footer below a rule."""
    return f"{markdown}\n\n---\n**Source:** [{title or url}]({url})"
