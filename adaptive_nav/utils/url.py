"""
URL helpers for page matching and direct navigation.
"""

from __future__ import annotations

from urllib import parse


def extract_path(url: str) -> str:
    """Return the path of *url*, or ``""`` when it cannot be parsed."""
    try:
        return parse.urlparse(url).path
    except ValueError:
        return ""


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a page path or query pattern.

    ``join_url("http://host:3000/app", "/tickets")`` keeps the ``/app``
    prefix, unlike ``urljoin``. Query-only patterns such as
    ``?page=tickets`` are appended to the base as-is. Absolute URLs
    are returned unchanged.
    """
    if path.startswith(("http://", "https://")):
        return path
    base = base_url.rstrip("/")
    if not path:
        return base + "/"
    if path.startswith("?"):
        return f"{base}/{path}"
    return f"{base}/{path.lstrip('/')}"


def matches_any_pattern(url: str, patterns: tuple[str, ...] | list[str]) -> str | None:
    """Return the first pattern contained in *url*, or ``None``.

    The bare root pattern ``"/"`` matches only a root path, otherwise
    every URL would satisfy it.
    """
    path = extract_path(url)
    for pattern in patterns:
        if pattern == "/":
            if path in ("", "/"):
                return pattern
            continue
        if pattern and pattern in url:
            return pattern
    return None
