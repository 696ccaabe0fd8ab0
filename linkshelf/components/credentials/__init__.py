"""
Credentials component - API key persistence.
"""

from .component import CREDENTIAL_KEY, CredentialStore

__all__ = [
    "CREDENTIAL_KEY",
    "CredentialStore",
]
