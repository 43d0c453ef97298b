"""API key resolution from layered sources.

Resolution walks an ordered list of providers and returns the first
non-empty value. The default order is:

    runtime override > configured value > persisted user override

Nothing is read until a key is actually needed.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from hive_detection.constants import CREDENTIAL_STORE_KEY

if TYPE_CHECKING:
    from hive_detection.storage import KeyValueStore

log = logging.getLogger(__name__)


@runtime_checkable
class CredentialProvider(Protocol):
    """A single source of an API key."""

    def try_resolve(self) -> str | None: ...  # noqa: D102


class StaticCredential:
    """A fixed value, e.g. the deploy-time configured key."""

    def __init__(self, value: str | None) -> None:  # noqa: D107
        self._value = _clean(value)

    def try_resolve(self) -> str | None:  # noqa: D102
        return self._value


class RuntimeCredential:
    """A key set explicitly during this process's lifetime."""

    def __init__(self) -> None:  # noqa: D107
        self.value: str | None = None

    def try_resolve(self) -> str | None:  # noqa: D102
        return self.value


class StoredCredential:
    """A key persisted in a `KeyValueStore` under a fixed entry."""

    def __init__(self, store: KeyValueStore, key: str = CREDENTIAL_STORE_KEY) -> None:  # noqa: D107
        self.store = store
        self.key = key

    def try_resolve(self) -> str | None:  # noqa: D102
        return _clean(self.store.get(self.key))


class CredentialResolver:
    """Determines the active API key and allows runtime replacement."""

    def __init__(
        self,
        providers: Sequence[CredentialProvider],
        *,
        runtime: RuntimeCredential | None = None,
        stored: StoredCredential | None = None,
    ) -> None:
        """Initialize with providers in precedence order.

        Args:
            providers: Providers consulted in order; first non-empty wins.
            runtime: The provider updated by `set_credential`, if any.
            stored: The provider whose store `set_credential` writes to, if any.
        """
        self._providers = tuple(providers)
        self._runtime = runtime
        self._stored = stored

    @classmethod
    def default(
        cls, configured: str | None, store: KeyValueStore
    ) -> CredentialResolver:
        """Build the standard runtime > configured > stored chain."""
        runtime = RuntimeCredential()
        stored = StoredCredential(store)
        return cls(
            (runtime, StaticCredential(configured), stored),
            runtime=runtime,
            stored=stored,
        )

    def resolve(self) -> str | None:
        """Return the active key, or None when unconfigured."""
        for provider in self._providers:
            value = provider.try_resolve()
            if value:
                return value
        return None

    def has_credential(self) -> bool:  # noqa: D102
        return self.resolve() is not None

    def set_credential(self, token: str) -> None:
        """Replace the active key and persist it.

        An empty or whitespace-only token clears both the runtime override
        and the persisted entry.
        """
        value = _clean(token)
        if self._runtime is not None:
            self._runtime.value = value
        if self._stored is not None:
            if value is None:
                self._stored.store.remove(self._stored.key)
            else:
                self._stored.store.set(self._stored.key, value)
        log.debug("API key %s", "cleared" if value is None else "updated")


def _clean(value: str | None) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None
