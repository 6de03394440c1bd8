import re
from typing import Optional, Tuple
from urllib.parse import urljoin, urlsplit, urlunsplit

from app.platform.exceptions import InvalidUrlError

ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

_STRIPPED_CHARS = re.compile(r"[\t\n\r]")


def _canonical_netloc(url: str, parts) -> str:
    try:
        port = parts.port
    except ValueError:
        raise InvalidUrlError(url, "malformed port")

    host = (parts.hostname or "").lower()
    if not host:
        raise InvalidUrlError(url, "missing host")
    if ":" in host:
        host = f"[{host}]"

    userinfo, _, _ = parts.netloc.rpartition("@")
    netloc = f"{userinfo}@{host}" if userinfo else host

    if port is not None and port != DEFAULT_PORTS[parts.scheme.lower()]:
        netloc = f"{netloc}:{port}"
    return netloc


def normalize_url(href: str, base_url: Optional[str] = None) -> str:
    """
    Resolve `href` against `base_url` and return the canonical absolute URL.

    The fragment is dropped, scheme and host are lower-cased, default ports are
    removed and an empty path becomes "/". Path and query are kept as written.
    Raises InvalidUrlError for anything that is not an absolute http(s) URL.
    """
    if href is None:
        raise InvalidUrlError("", "empty URL")

    cleaned = _STRIPPED_CHARS.sub("", str(href)).strip()
    if not cleaned and base_url is None:
        raise InvalidUrlError(str(href), "empty URL")

    try:
        resolved = urljoin(base_url, cleaned) if base_url else cleaned
        parts = urlsplit(resolved)
    except ValueError as e:
        raise InvalidUrlError(cleaned, str(e))

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidUrlError(resolved, f"unsupported scheme {parts.scheme or '(none)'!r}")

    netloc = _canonical_netloc(resolved, parts)
    path = parts.path or "/"
    return urlunsplit((scheme, netloc, path, parts.query, ""))


def get_origin(url: str) -> str:
    """scheme://host[:port] of an absolute http(s) URL."""
    parts = urlsplit(normalize_url(url))
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}"


def validate_url(url: str) -> Tuple[bool, str, str]:
    if not url or not url.strip():
        return False, "", "URL cannot be empty"

    try:
        normalized_url = normalize_url(url)
    except InvalidUrlError as e:
        return False, url.strip(), e.reason

    return True, normalized_url, ""
