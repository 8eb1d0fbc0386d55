"""Reference-counted string interning.

Document ids, aliases and cached normalized forms all pass through one pool so
equal text is held once per index. Owners take a reference with ``intern`` and
give it back with ``release``; an entry disappears when its last owner lets go.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class _PoolEntry:
    value: str
    refs: int = 0


class StringPool:
    """Interns immutable text and tracks how many owners share each value."""

    def __init__(self) -> None:
        self._entries: dict[str, _PoolEntry] = {}

    def intern(self, text: str) -> str:
        """Return the shared instance for ``text`` and take a reference to it."""

        entry = self._entries.get(text)
        if entry is None:
            entry = _PoolEntry(value=text)
            self._entries[text] = entry
        entry.refs += 1
        return entry.value

    def release(self, text: str) -> bool:
        """Drop one reference; return True when the entry was freed."""

        entry = self._entries.get(text)
        if entry is None:
            return False
        entry.refs -= 1
        if entry.refs > 0:
            return False
        del self._entries[text]
        return True

    def refcount(self, text: str) -> int:
        entry = self._entries.get(text)
        return entry.refs if entry is not None else 0

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, text: object) -> bool:
        return text in self._entries

    def __len__(self) -> int:
        return len(self._entries)
