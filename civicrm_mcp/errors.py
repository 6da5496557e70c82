"""Exceptions raised by the CiviCRM MCP server."""

from typing import Optional


class CiviCRMError(Exception):
    """Base class for everything this package raises."""


class ConfigurationError(CiviCRMError):
    """Required configuration is missing or invalid.

    Raised before the server starts serving; the process exits on it.
    """


class CiviCRMAPIError(CiviCRMError):
    """A CiviCRM APIv4 call failed.

    The message carries CiviCRM's own ``error_message`` when the response
    included one, otherwise the transport error.
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        action: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.entity = entity
        self.action = action
        self.status_code = status_code
        super().__init__(f"CiviCRM API v4 Error: {message}")
