"""Exception hierarchy for registry, prober and aggregation failures."""

from typing import List


class MonitorError(Exception):
    """Base class for all Uptime Monitor errors."""


class SiteValidationError(MonitorError):
    """Site input was rejected before any storage write."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid site")


class DuplicateAliasError(MonitorError):
    """Another site is already registered under this alias."""

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"Site with alias '{alias}' already exists")


class SiteNotFoundError(MonitorError):
    """No site is registered under this alias."""

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"Site '{alias}' not found")


class StorageError(MonitorError):
    """
    The persistence layer failed.

    Always raised from the underlying SQLAlchemy error so the original cause
    stays available on ``__cause__``.
    """


class ProbeError(MonitorError):
    """The GET request to a site failed before any response arrived."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to send request to {url}: {reason}")


class NotSupportedError(MonitorError):
    """The requested feature is not implemented."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"{feature} is not supported yet")
