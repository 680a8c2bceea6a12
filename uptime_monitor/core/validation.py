"""Input validation for new sites."""

from dataclasses import dataclass, field
from typing import List

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

MAX_ALIAS_LENGTH = 255
MAX_URL_LENGTH = 2048

# Aliases are used as a single path segment in /sites/{alias}
RESERVED_ALIAS_CHARACTERS = "/?#%"

_url_adapter = TypeAdapter(AnyUrl)


@dataclass
class ValidationResult:
    """Outcome of validating a site; ``errors`` is empty when valid."""
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_url(url: str) -> List[str]:
    """Return the problems with ``url``; absolute URLs need a scheme and a host."""
    if not isinstance(url, str) or not url.strip():
        return ["url must not be empty"]
    if len(url) > MAX_URL_LENGTH:
        return [f"url must be at most {MAX_URL_LENGTH} characters"]

    try:
        parsed = _url_adapter.validate_python(url)
    except PydanticValidationError as e:
        reason = e.errors()[0].get("msg", "invalid URL")
        return [f"url is not a valid absolute URL: {reason}"]

    if not parsed.host:
        return ["url must include a host"]
    return []


def validate_alias(alias: str) -> List[str]:
    """Return the problems with ``alias``."""
    if not isinstance(alias, str) or not alias.strip():
        return ["alias must not be empty"]
    if len(alias) > MAX_ALIAS_LENGTH:
        return [f"alias must be at most {MAX_ALIAS_LENGTH} characters"]
    reserved = sorted({char for char in alias if char in RESERVED_ALIAS_CHARACTERS})
    if reserved:
        return [f"alias must not contain {''.join(reserved)!r}"]
    return []


def validate_site(url: str, alias: str) -> ValidationResult:
    """
    Validate a prospective site.

    Args:
        url: URL to probe
        alias: External identifier

    Returns:
        ValidationResult: Collected errors for both fields
    """
    return ValidationResult(errors=validate_url(url) + validate_alias(alias))
