import re
from typing import Annotated

from pydantic import AnyUrl, TypeAdapter, UrlConstraints, ValidationError

from services.exceptions import InvalidUrlError

ALLOWED_PREFIXES = ("http://", "https://")
SHORT_CODE_PATTERN = re.compile(r"^[A-Za-z0-9]{6}$")
# Normalizing "ftp://x.com" yields "https://ftp://x.com", which is not a URL we accept.
_EMBEDDED_SCHEME = re.compile(r"^https?://[A-Za-z][A-Za-z0-9+.-]*://")

# No max_length, unlike HttpUrl (2083 characters).
_http_url = TypeAdapter(
    Annotated[AnyUrl, UrlConstraints(allowed_schemes=["http", "https"], host_required=True)]
)


def normalize_url(value: str) -> str:
    """Trim whitespace and default the scheme to https."""
    value = value.strip()
    if not value.startswith(ALLOWED_PREFIXES):
        return f"https://{value}"
    return value


def validate_url(url: str) -> None:
    if not url:
        raise InvalidUrlError("URL cannot be empty")
    if not url.startswith(ALLOWED_PREFIXES):
        raise InvalidUrlError("URL must start with http:// or https://")
    if _EMBEDDED_SCHEME.match(url) or any(ch.isspace() for ch in url):
        raise InvalidUrlError("Please enter a valid URL")
    try:
        _http_url.validate_python(url)
    except ValidationError as exc:
        raise InvalidUrlError("Please enter a valid URL") from exc


def is_valid_short_code(code) -> bool:
    return isinstance(code, str) and SHORT_CODE_PATTERN.fullmatch(code) is not None
