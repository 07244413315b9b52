"""Errors raised by the WSAPI client.

Every error carries ``errors``, the list of messages describing the failure.
The exception message is the first of them.
"""

from typing import Any, List, Optional, Sequence


class RallyError(Exception):
    """Base class for all client errors."""

    def __init__(self, errors: Sequence[Any]):
        self.errors: List[str] = [str(e) for e in errors] or ["Unknown error"]
        super().__init__(self.errors[0])


class RallyConnectionError(RallyError, ConnectionError):
    """The server could not be reached."""


class MalformedResponseError(RallyError):
    """The server answered with something other than a wrapped JSON object."""

    def __init__(self, url: str, status_code: Optional[int], body: Any):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__([f"{url}: {status_code}! body={body}"])


class ServiceError(RallyError):
    """The service reported one or more errors in the result ``Errors`` list."""


class AuthorizationError(ServiceError):
    """The security token handshake failed or returned no token."""
