"""
Exceptions raised by the offline cache controller.
"""


class OfflineError(Exception):
    """Base class for controller errors."""


class NetworkError(OfflineError):
    """The network could not produce a response (connection refused, DNS, timeout)."""

    def __init__(self, url: str, reason: str = ''):
        self.url = url
        self.reason = reason
        super().__init__(f"Network request to {url} failed: {reason}" if reason
                         else f"Network request to {url} failed")


class InstallError(OfflineError):
    """Pre-caching the static manifest failed; the worker must not activate."""


class BodyUsedError(OfflineError):
    """A response body was read (or cloned) after it had already been consumed."""
