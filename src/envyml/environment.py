"""Layered environment store.

Variables live in two named layers:

- ``request``: request-scope variables. Names starting with ``HTTP_`` in this
  layer are request-transport metadata (client supplied headers) and are
  never treated as configuration.
- ``process``: process-scope variables set by envyml or the host.

Lookups consult ``request`` first, then ``process``, then (optionally) the
OS environment. With ``use_putenv`` enabled every write is mirrored into
``os.environ`` so child processes and libraries reading it see the values.

The store performs no locking; one writer per process is assumed.
"""

from __future__ import annotations

import os
from typing import Dict, Iterator, MutableMapping, Optional

REQUEST_METADATA_PREFIX = "HTTP_"


def is_request_metadata(name: str) -> bool:
    """Return True for names reserved for request-transport metadata."""
    return name.startswith(REQUEST_METADATA_PREFIX)


class EnvironmentStore:
    """Explicit, passed-around replacement for ambient env globals.

    Example:
        store = EnvironmentStore.from_os()
        store.set("DATABASE_URL", "postgres://...")
        store.get("DATABASE_URL")
    """

    def __init__(
        self,
        request: Optional[MutableMapping[str, str]] = None,
        process: Optional[MutableMapping[str, str]] = None,
        os_environ: Optional[MutableMapping[str, str]] = None,
        use_putenv: bool = False,
    ) -> None:
        """Create a store.

        Args:
            request: Request-scope layer (created empty when omitted)
            process: Process-scope layer (created empty when omitted)
            os_environ: Mapping consulted as the last lookup layer and written
                to when ``use_putenv`` is True. None disables both.
            use_putenv: Mirror writes into ``os_environ``
        """
        self.request: MutableMapping[str, str] = request if request is not None else {}
        self.process: MutableMapping[str, str] = process if process is not None else {}
        self.os_environ = os_environ
        self.use_putenv = use_putenv and os_environ is not None

    @classmethod
    def from_os(cls, use_putenv: bool = True) -> "EnvironmentStore":
        """Build a store seeded from the current process environment.

        The request layer starts as a snapshot of ``os.environ`` so variables
        set by the OS or the surrounding process count as existing.
        """
        return cls(
            request=dict(os.environ),
            process={},
            os_environ=os.environ,
            use_putenv=use_putenv,
        )

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Explicit read: request layer first, then process layer.

        Request-transport metadata is only read from the process layer, where
        ``set`` writes it.
        """
        if name in self.request and not is_request_metadata(name):
            return self.request[name]
        if name in self.process:
            return self.process[name]
        return default

    def lookup(self, name: str) -> str:
        """Resolve a name for interpolation.

        Request-transport metadata in the request layer is skipped; unknown
        names resolve to an empty string.
        """
        if name in self.request and not is_request_metadata(name):
            return self.request[name]
        if name in self.process:
            return self.process[name]
        if self.os_environ is not None:
            return self.os_environ.get(name, "")
        return ""

    def exists(self, name: str) -> bool:
        """Return True when a variable is already defined by someone.

        The live ``os_environ`` counts too, so variables exported after the
        store was built still win over loaded values.
        """
        if name in self.process:
            return True
        if is_request_metadata(name):
            return False
        if name in self.request:
            return True
        return self.os_environ is not None and name in self.os_environ

    def set(self, name: str, value: str) -> None:
        """Write a variable into every layer that accepts it."""
        if self.use_putenv and self.os_environ is not None:
            self.os_environ[name] = value
        self.process[name] = value
        if not is_request_metadata(name):
            self.request[name] = value

    def names(self) -> Iterator[str]:
        """Enumerate every name readable through ``get`` once, request layer first."""
        seen = set()
        for name in self.request:
            if not is_request_metadata(name):
                seen.add(name)
                yield name
        for name in self.process:
            if name not in seen:
                yield name

    def as_dict(self) -> Dict[str, str]:
        """Snapshot of the store as seen through ``get``."""
        result = dict(self.process)
        result.update((k, v) for k, v in self.request.items() if not is_request_metadata(k))
        return result

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None
