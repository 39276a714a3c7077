"""The shell's environment, kept as an ordered list of NAME=value entries."""

from collections.abc import Iterable, Iterator


class Environment:
    """Ordered collection of ``NAME=value`` strings."""

    def __init__(self, entries: Iterable[str] | None = None) -> None:
        self._entries: list[str] = list(entries) if entries is not None else []

    def find(self, name: str | None) -> int | None:
        """Return the position of the entry defining ``name``, or None."""
        if name is None:
            return None
        prefix = name + "="
        return next(
            (i for i, entry in enumerate(self._entries) if entry.startswith(prefix)),
            None,
        )

    def get(self, name: str | None) -> str | None:
        """Return the value of ``name``, or None when it is not set."""
        index = self.find(name)
        if index is None:
            return None
        return self._entries[index][len(name) + 1:]

    def unset(self, name: str | None) -> bool:
        """Remove the entry defining ``name``; return whether one was removed."""
        index = self.find(name)
        if index is None:
            return False
        del self._entries[index]
        return True

    def replace_prefixed(self, prefix: str, entry: str) -> bool:
        """Replace the first entry starting with ``prefix`` by ``entry``.

        Returns False and changes nothing when no entry starts with ``prefix``.
        """
        for i, current in enumerate(self._entries):
            if current.startswith(prefix):
                self._entries[i] = entry
                return True
        return False

    def append(self, entry: str) -> None:
        """Add ``entry`` at the end."""
        self._entries.append(entry)

    def to_list(self) -> list[str]:
        """Return a copy of the entries, in order."""
        return list(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def split_path(value: str | None) -> list[str]:
    """Split a PATH-like value on ':' and drop empty fields."""
    if value is None:
        return []
    return [part for part in value.split(":") if part]