"""Population of the environment store.

Variables defined by the OS or the surrounding process win over loaded ones
unless overriding is requested. Variables envyml set itself are "owned" and
may be refined by later loads, e.g. a base file followed by an overlay.

Ownership is recorded inside the environment store under ``REGISTRY_NAME``
as a comma separated list, so independent loaders in the same process
agree on it.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from envyml.environment import EnvironmentStore
from envyml.logger import Logger, create_logger

REGISTRY_NAME = "ENVYML_DOTENV_VARS"
REGISTRY_SEPARATOR = ","


class OwnedNameRegistry:
    """Ordered set of names populated by envyml."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: Dict[str, None] = {}
        for name in names:
            self.add(name)

    @classmethod
    def read(cls, store: EnvironmentStore) -> "OwnedNameRegistry":
        """Load the registry persisted in ``store``."""
        raw = store.get(REGISTRY_NAME) or ""
        return cls(raw.split(REGISTRY_SEPARATOR))

    def write(self, store: EnvironmentStore) -> None:
        """Persist the registry into ``store``."""
        store.set(REGISTRY_NAME, self.serialize())

    def add(self, name: str) -> bool:
        """Add ``name``; return True if it was not registered yet."""
        if not name or name in self._names:
            return False
        self._names[name] = None
        return True

    def serialize(self) -> str:
        return REGISTRY_SEPARATOR.join(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self):
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)


class Populator:
    """Apply flat maps to an environment store.

    Example:
        populator = Populator(EnvironmentStore.from_os())
        populator.populate({"FOO": "bar"})
    """

    def __init__(self, store: EnvironmentStore, logger: Optional[Logger] = None) -> None:
        self.store = store
        self.logger = logger or create_logger(name="envyml.populate")

    def populate(self, values: Mapping[str, str], override_existing: bool = False) -> None:
        """Set ``values`` in the environment store.

        Args:
            values: Variables to set, applied in iteration order
            override_existing: Overwrite variables envyml does not own
        """
        registry = OwnedNameRegistry.read(self.store)
        registry_changed = False
        applied = skipped = 0

        for name, value in values.items():
            if name not in registry and not override_existing and self.store.exists(name):
                skipped += 1
                continue

            self.store.set(name, value)
            applied += 1
            if registry.add(name):
                registry_changed = True

        if registry_changed:
            registry.write(self.store)

        self.logger.debug(
            "Environment populated",
            applied=applied,
            skipped=skipped,
            override=override_existing,
        )


__all__ = ["OwnedNameRegistry", "Populator", "REGISTRY_NAME"]
