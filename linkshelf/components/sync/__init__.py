"""
Sync component - Canonical link collection and reconciliation.
"""

from ._impl import dedupe, merge_update
from .component import NO_CREDENTIAL_MESSAGE, SyncEngine
from .models import (
    CommandResult,
    CommandStatus,
    ReloadOutcome,
    ReloadResult,
    RequestState,
    SyncSnapshot,
)
from .ports import CredentialPort, LinkCachePort

__all__ = [
    # Engine
    "SyncEngine",
    "NO_CREDENTIAL_MESSAGE",
    # Pure helpers
    "dedupe",
    "merge_update",
    # Models
    "CommandResult",
    "CommandStatus",
    "ReloadOutcome",
    "ReloadResult",
    "RequestState",
    "SyncSnapshot",
    # Ports
    "CredentialPort",
    "LinkCachePort",
]
