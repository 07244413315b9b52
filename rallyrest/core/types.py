"""Core data types and Pydantic models."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class Method(str, Enum):
    """HTTP verbs understood by the transport session."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def secured(self) -> bool:
        """Mutating verbs need a security token (or an API key)."""
        return self is not Method.GET


class Scope(BaseModel):
    """Workspace or project restriction applied to a request."""
    model_config = ConfigDict(frozen=True)

    workspace: Optional[Any] = Field(None, description="Workspace ref")
    project: Optional[Any] = Field(None, description="Project ref, wins over workspace")
    up: Optional[bool] = Field(None, description="Include parent project data")
    down: Optional[bool] = Field(None, description="Include child project data")


class AuthState(str, Enum):
    """Security token handshake states."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
