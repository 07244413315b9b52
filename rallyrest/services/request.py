"""Transport session for the Rally Web Services API.

Wraps an ``httpx.AsyncClient``, unwraps WSAPI responses and performs the
security token handshake required before create/update/delete requests when
no API key is configured.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx

from rallyrest.core.config import ClientConfig
from rallyrest.core.errors import (
    AuthorizationError,
    MalformedResponseError,
    RallyConnectionError,
    ServiceError,
)
from rallyrest.core.logging import get_logger, redact_sensitive
from rallyrest.core.types import AuthState, Method
from rallyrest.util.merge import deep_merge
from rallyrest.version import DESCRIPTION, VENDOR, __version__

logger = get_logger(__name__)

AUTHORIZE_URL = "/security/authorize"


def default_request_options(config: ClientConfig) -> Dict[str, Any]:
    """Integration headers and credentials sent with every request."""
    options: Dict[str, Any] = {
        "headers": {
            "X-RallyIntegrationLibrary": f"{DESCRIPTION} v{__version__}",
            "X-RallyIntegrationName": DESCRIPTION,
            "X-RallyIntegrationVendor": VENDOR,
            "X-RallyIntegrationVersion": __version__,
        }
    }
    if config.uses_api_key:
        options["headers"]["zsessionid"] = config.api_key
    elif config.user is not None or config.password is not None:
        options["auth"] = (config.user or "", config.password or "")
    return options


class Request:
    """Dispatches WSAPI requests and owns the cached security token."""

    def __init__(self, config: ClientConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.wsapi_url = config.wsapi_url
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self._request_options = deep_merge(default_request_options(config), config.request_options)
        self._has_key = config.uses_api_key
        self._token: Optional[str] = None
        self._auth_task: Optional["asyncio.Future[str]"] = None

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    @property
    def auth_state(self) -> AuthState:
        if self._token is not None:
            return AuthState.AUTHENTICATED
        if self._auth_task is not None:
            return AuthState.AUTHENTICATING
        return AuthState.UNAUTHENTICATED

    async def get(self, options: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request(Method.GET, options)

    async def post(self, options: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request(Method.POST, options)

    async def put(self, options: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request(Method.PUT, options)

    async def delete(self, options: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request(Method.DELETE, options)

    async def request(self, method: Method, options: Dict[str, Any]) -> Dict[str, Any]:
        """Send a request, adding the security token for secured verbs.

        Args:
            method: HTTP verb
            options: Request descriptor; ``url`` is relative to the WSAPI root,
                other keys are passed to httpx (params, json, headers, ...)

        Returns:
            The unwrapped result object

        Raises:
            RallyConnectionError: The server could not be reached
            MalformedResponseError: The body is not a wrapped JSON object
            ServiceError: The result reported errors
        """
        if method.secured and not self._has_key:
            token = await self._ensure_token()
            options = deep_merge(options, {"params": {"key": token}})
        return await self._do_request(method, options)

    async def _ensure_token(self) -> str:
        if self._token is not None:
            return self._token
        # Callers arriving mid-handshake share the pending authorization
        if self._auth_task is None:
            self._auth_task = asyncio.ensure_future(self._authorize())
        return await asyncio.shield(self._auth_task)

    async def _authorize(self) -> str:
        logger.info(f"Requesting security token from {self.wsapi_url}{AUTHORIZE_URL}")
        try:
            try:
                result = await self._do_request(Method.GET, {"url": AUTHORIZE_URL})
            except AuthorizationError:
                raise
            except ServiceError as e:
                raise AuthorizationError(e.errors) from e
            token = result.get("SecurityToken")
            if not token:
                raise AuthorizationError([f"{AUTHORIZE_URL}: no SecurityToken in response"])
        except BaseException:
            # Any failure leaves the session unauthenticated
            self._auth_task = None
            raise

        self._token = token
        logger.info("Security token acquired")
        return token

    async def _do_request(self, method: Method, options: Dict[str, Any]) -> Dict[str, Any]:
        request_options = deep_merge(self._request_options, options)
        path = request_options.pop("url")
        url = self.wsapi_url + path

        logger.debug(
            f"{method.value} {url}",
            extra={
                "method": method.value,
                "url": url,
                "params": redact_sensitive(request_options.get("params", {})),
            },
        )

        try:
            response = await self._client.request(method.value, url, **request_options)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Unable to connect to server {self.wsapi_url}: {e}")
            raise RallyConnectionError([f"Unable to connect to server: {self.wsapi_url} ({e})"]) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict) or not body:
            logger.warning(f"Malformed response from {path}: {response.status_code}")
            raise MalformedResponseError(path, response.status_code, response.text)

        # Every result is wrapped under one key, e.g. {"QueryResult": {...}}
        result = next(iter(body.values()))
        if not isinstance(result, dict):
            raise MalformedResponseError(path, response.status_code, response.text)

        errors = result.get("Errors") or []
        if errors:
            logger.warning(f"{method.value} {path} failed: {'; '.join(map(str, errors))}")
            raise ServiceError(errors)

        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
