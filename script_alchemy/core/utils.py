"""
Common utilities.
"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

__all__ = [
    "DEFAULT_HOST",
    "add_query",
]

DEFAULT_HOST = "https://script.googleapis.com/v1"
"""
Base URL of the remote API.
"""


def add_query(url: str, **params: str | int | None) -> str:
    """
    Return url with query parameters appended, preserving any existing ones.
    Parameters with value `None` are omitted.
    """
    parts = urlsplit(url)

    query = parse_qsl(parts.query, keep_blank_values=True)
    query += [(k, str(v)) for k, v in params.items() if v is not None]

    return urlunsplit(parts._replace(query=urlencode(query)))
