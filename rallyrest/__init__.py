"""Async client for the Rally Web Services API."""

from rallyrest.core.config import ClientConfig, load_config
from rallyrest.core.errors import (
    AuthorizationError,
    MalformedResponseError,
    RallyConnectionError,
    RallyError,
    ServiceError,
)
from rallyrest.core.types import Scope
from rallyrest.services.restapi import RestApi, create_client
from rallyrest.util import ref
from rallyrest.util.query import Query, where
from rallyrest.version import __version__

__all__ = [
    "AuthorizationError",
    "ClientConfig",
    "MalformedResponseError",
    "Query",
    "RallyConnectionError",
    "RallyError",
    "RestApi",
    "Scope",
    "ServiceError",
    "create_client",
    "load_config",
    "ref",
    "where",
    "__version__",
]
