"""Rally Web Services API client.

Higher-level operations on WSAPI resources: create, get, update, delete,
query (with automatic paging) and collection add/remove.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from rallyrest.core.config import ClientConfig, load_config
from rallyrest.core.logging import get_logger
from rallyrest.core.types import Scope
from rallyrest.services.request import Request
from rallyrest.util import ref
from rallyrest.util.callbackify import callbackify
from rallyrest.util.merge import deep_merge
from rallyrest.util.query import Query

logger = get_logger(__name__)

Fields = Union[str, List[str], None]
ScopeLike = Union[Scope, Dict[str, Any], None]


def _join(value: Fields) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        return ",".join(value)
    if isinstance(value, str):
        return value
    return None


def options_to_params(scope: ScopeLike = None, fetch: Fields = None) -> Dict[str, Any]:
    """Query string parameters for scope and fetch.

    A project scope replaces the workspace scope.
    """
    params: Dict[str, Any] = {}
    if scope is not None:
        scope = scope if isinstance(scope, Scope) else Scope.model_validate(scope)
        if scope.project:
            params["project"] = ref.get_relative(scope.project)
            if scope.up is not None:
                params["projectScopeUp"] = scope.up
            if scope.down is not None:
                params["projectScopeDown"] = scope.down
        elif scope.workspace:
            params["workspace"] = ref.get_relative(scope.workspace)

    fetch = _join(fetch)
    if fetch is not None:
        params["fetch"] = fetch
    return params


class RestApi:
    """Client for the Rally Web Services API.

    Credentials come from ``api_key`` (sent as the zsessionid header) or
    ``user``/``password`` (basic auth plus a security token for writes), with
    RALLY_API_KEY, RALLY_USERNAME and RALLY_PASSWORD as fallbacks.

    Example:
        async with RestApi(api_key="_abc123") as api:
            result = await api.query(type="defect", fetch=["Name"], limit=10)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        **options: Any,
    ):
        self.config = config or load_config(**options)
        if self.config.debug:
            logging.getLogger("rallyrest").setLevel(logging.DEBUG)
        self.request = Request(self.config, client=client)

    async def __aenter__(self) -> "RestApi":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.request.aclose()

    @property
    def cookies(self) -> httpx.Cookies:
        return self.request.cookies

    @callbackify
    async def create(
        self,
        type: str,
        data: Dict[str, Any],
        fetch: Fields = None,
        scope: ScopeLike = None,
        request_options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a new object.

        Args:
            type: Type to create, e.g. defect; "batch" posts to /batch
            data: Field values of the new object
            fetch: Fields to include on the returned object
            scope: Workspace/project scope
            request_options: Extra httpx options, applied last

        Returns:
            The CreateResult object
        """
        url = "/batch" if type == "batch" else f"/{type}/create"
        return await self.request.post(self._build(
            {"url": url, "json": {type: data}},
            options_to_params(scope, fetch),
            request_options,
        ))

    @callbackify
    async def update(
        self,
        ref: Any,
        data: Dict[str, Any],
        fetch: Fields = None,
        scope: ScopeLike = None,
        request_options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Update the object at ``ref`` with ``data``."""
        return await self.request.put(self._build(
            {"url": _relative(ref), "json": {_type(ref): data}},
            options_to_params(scope, fetch),
            request_options,
        ))

    @callbackify
    async def delete(
        self,
        ref: Any,
        scope: ScopeLike = None,
        request_options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Delete the object at ``ref``."""
        return await self.request.delete(self._build(
            {"url": _relative(ref)},
            options_to_params(scope),
            request_options,
        ))

    del_ = delete

    @callbackify
    async def get(
        self,
        ref: Any,
        fetch: Fields = None,
        scope: ScopeLike = None,
        request_options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Read an object.

        Returns:
            ``{"Errors": [...], "Warnings": [...], "Object": {...}}``
        """
        result = await self.request.get(self._build(
            {"url": _relative(ref)},
            options_to_params(scope, fetch),
            request_options,
        ))
        return {
            "Errors": result.get("Errors", []),
            "Warnings": result.get("Warnings", []),
            "Object": {k: v for k, v in result.items() if k not in ("Errors", "Warnings")},
        }

    @callbackify
    async def query(
        self,
        ref: Any = None,
        type: Optional[str] = None,
        start: int = 1,
        page_size: int = 200,
        limit: Optional[int] = None,
        fetch: Fields = None,
        order: Fields = None,
        query: Union[Query, str, None] = None,
        scope: ScopeLike = None,
        request_options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Query a type or a collection, fetching as many pages as needed.

        Without a ``limit`` only the first page is returned.

        Args:
            ref: Collection ref, e.g. /defect/1234/tasks
            type: Type to query when no ref is given, e.g. defect
            start: 1 based start index
            page_size: Page size, 1 - 200
            limit: Maximum number of results to return
            fetch: Fields to include on each result
            order: Sort order
            query: Query expression or raw query string
            scope: Workspace/project scope
            request_options: Extra httpx options, applied last

        Returns:
            The QueryResult with ``Results`` holding every fetched row,
            ``StartIndex`` set to ``start`` and ``PageSize`` to the row count
        """
        params: Dict[str, Any] = {
            "start": start,
            "pagesize": min(page_size, limit) if limit else page_size,
        }
        order = _join(order)
        if order is not None:
            params["order"] = order
        if query:
            params["query"] = query.to_query_string() if isinstance(query, Query) else query

        options = self._build(
            {"url": _relative(ref) or f"/{type}", "params": params},
            options_to_params(scope, fetch),
            request_options,
        )

        results: List[Any] = []
        result = await self.request.get(options)
        while True:
            results.extend(result.get("Results", []))
            if not limit:
                break
            next_start = result.get("StartIndex", start) + page_size
            if next_start > min(limit, result.get("TotalResultCount", 0)):
                break
            logger.debug(f"Fetching next page at {next_start}")
            result = await self.request.get(deep_merge(options, {"params": {"start": next_start}}))

        results = results[:limit] if limit else results
        result["Results"] = results
        result["StartIndex"] = start
        result["PageSize"] = len(results)
        return result

    @callbackify
    async def add(
        self,
        ref: Any,
        collection: str,
        data: List[Dict[str, Any]],
        fetch: Fields = None,
        scope: ScopeLike = None,
        request_options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Add items to a collection, e.g. ``add("/user/1", "TeamMemberships", [...])``."""
        return await self._collection_post("add", ref, collection, data, fetch, scope, request_options)

    @callbackify
    async def remove(
        self,
        ref: Any,
        collection: str,
        data: List[Dict[str, Any]],
        fetch: Fields = None,
        scope: ScopeLike = None,
        request_options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Remove items (by ``_ref``) from a collection."""
        return await self._collection_post("remove", ref, collection, data, fetch, scope, request_options)

    async def _collection_post(self, operation, ref, collection, data, fetch, scope, request_options):
        return await self.request.post(self._build(
            {
                "url": f"{_relative(ref)}/{collection}/{operation}",
                "json": {"CollectionItems": data},
            },
            options_to_params(scope, fetch),
            request_options,
        ))

    @staticmethod
    def _build(
        base: Dict[str, Any],
        params: Dict[str, Any],
        request_options: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        return deep_merge(base, {"params": params}, request_options)


def _relative(value: Any) -> Optional[str]:
    return ref.get_relative(value)


def _type(value: Any) -> Optional[str]:
    return ref.get_type(value)


def create_client(config: Optional[ClientConfig] = None, **options: Any) -> RestApi:
    """Create a RestApi client; options are passed to ``load_config``."""
    return RestApi(config, **options)
