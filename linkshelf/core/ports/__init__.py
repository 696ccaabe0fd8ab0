# linkshelf: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from linkshelf.core.ports.gateway import (
    LINK_LIMIT_REACHED,
    AuthError,
    FormatError,
    GatewayError,
    LimitReachedError,
    LinkGatewayPort,
    NetworkError,
    RequestError,
)
from linkshelf.core.ports.page import PageMetadataPort
from linkshelf.core.ports.render import RenderSinkPort, ViewState
from linkshelf.core.ports.storage import (
    KeyValueStorePort,
    StorageCorruptedError,
    StorageError,
)

__all__ = [
    # Gateway
    "LINK_LIMIT_REACHED",
    "AuthError",
    "FormatError",
    "GatewayError",
    "LimitReachedError",
    "LinkGatewayPort",
    "NetworkError",
    "RequestError",
    # Page metadata
    "PageMetadataPort",
    # Render
    "RenderSinkPort",
    "ViewState",
    # Storage
    "KeyValueStorePort",
    "StorageCorruptedError",
    "StorageError",
]
