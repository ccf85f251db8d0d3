"""Portable trust credentials.

A credential is a self-contained export of one scored record, bound by a
content hash so any verifier can detect tampering without access to the
issuing profile's history.
"""
from __future__ import annotations

from trust_protocol.credentials.credential import (
    CredentialIssuer,
    TrustCredential,
    credential_content_hash,
    is_credential_expired,
    verify_credential,
)

__all__ = [
    "CredentialIssuer",
    "TrustCredential",
    "credential_content_hash",
    "is_credential_expired",
    "verify_credential",
]
