"""Workers and helpers built on the public store contract."""

from __future__ import annotations

from .fetch import (
    FETCH_KIND,
    FetchError,
    FetchResource,
    empty_fetch_resource,
    fetch_resource,
    json_resolver,
    model_resolver,
    text_resolver,
)
from .focused import focused
from .http import HttpClient
from .resource import (
    CompleteResource,
    FailedResource,
    LoadingResource,
    NilResource,
    Resource,
    ResourceInterface,
    ThrownResource,
    empty_resource,
    get_data,
    get_graceful_error,
    get_unexpected_error,
    is_complete,
    is_failed,
    is_kind,
    is_loading,
    is_thrown,
    resource,
)

__all__ = [
    "FETCH_KIND",
    "CompleteResource",
    "FailedResource",
    "FetchError",
    "FetchResource",
    "HttpClient",
    "LoadingResource",
    "NilResource",
    "Resource",
    "ResourceInterface",
    "ThrownResource",
    "empty_fetch_resource",
    "empty_resource",
    "fetch_resource",
    "focused",
    "get_data",
    "get_graceful_error",
    "get_unexpected_error",
    "is_complete",
    "is_failed",
    "is_kind",
    "is_loading",
    "is_thrown",
    "json_resolver",
    "model_resolver",
    "resource",
    "text_resolver",
]
