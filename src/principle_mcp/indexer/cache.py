"""In-memory cache of indexed principles."""

import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from principle_mcp.indexer.models import Principle


class PrincipleCache:
    """
    Process-wide mapping of principle name to principle subtree.

    Entries are only ever replaced whole, so a reader sees either the old
    or the new subtree for a name, never a mix. ``get_all`` returns a
    read-only copy taken under the lock.
    """

    def __init__(self):
        self._principles: dict[str, Principle] = {}
        self._lock = threading.Lock()

    def put(self, name: str, principle: Principle) -> None:
        with self._lock:
            self._principles[name] = principle

    def put_all(self, principles: Mapping[str, Principle]) -> None:
        with self._lock:
            self._principles.update(principles)

    def get(self, name: str) -> Principle | None:
        with self._lock:
            return self._principles.get(name)

    def get_all(self) -> Mapping[str, Principle]:
        with self._lock:
            return MappingProxyType(dict(self._principles))

    def contains(self, name: str) -> bool:
        with self._lock:
            return name in self._principles

    def names(self) -> set[str]:
        with self._lock:
            return set(self._principles)

    def remove(self, names: Iterable[str]) -> None:
        with self._lock:
            for name in names:
                self._principles.pop(name, None)

    def remove_unchanged(self, entries: Mapping[str, Principle]) -> list[str]:
        """
        Remove each name only if it still maps to the given principle.

        Entries written since ``entries`` was read are kept.

        Returns the names actually removed.
        """
        removed = []
        with self._lock:
            for name, principle in entries.items():
                if self._principles.get(name) is principle:
                    del self._principles[name]
                    removed.append(name)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._principles.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._principles)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        return self.size()
