"""Credential stores mapping access key ids to shared secrets."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

Secret = str | bytes


@runtime_checkable
class CredentialStore(Protocol):
    """Point lookup of the secret for an access key id."""

    def secret_for(self, access_key_id: str) -> Secret | None: ...


class MappingCredentialStore:
    """Credential store backed by a read-only mapping."""

    def __init__(self, credentials: Mapping[str, Secret] | None = None) -> None:
        self._credentials: Mapping[str, Secret] = credentials if credentials is not None else {}

    def secret_for(self, access_key_id: str) -> Secret | None:
        return self._credentials.get(access_key_id)

    def __contains__(self, access_key_id: object) -> bool:
        return access_key_id in self._credentials

    def __repr__(self) -> str:
        # Keys only, secrets stay out of reprs and logs
        return f"MappingCredentialStore(keys={sorted(self._credentials)!r})"


def credential_store(
    credentials: CredentialStore | Mapping[str, Secret] | None,
) -> CredentialStore:
    """Coerce a mapping, an existing store or None into a CredentialStore."""
    if isinstance(credentials, CredentialStore):
        return credentials
    if credentials is None or isinstance(credentials, Mapping):
        return MappingCredentialStore(credentials)
    raise TypeError(f"Unsupported credential store: {type(credentials).__name__}")
