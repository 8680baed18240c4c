"""Deterministic de-duplication of node names within one export run."""

from typing import Dict, FrozenSet, Set


class UniqueNameResolver:
    """
    Hands out collision-free names.

    The first request for a name returns it unchanged; later requests for the
    same name get ``-1``, ``-2``, ... appended. Generated names are tracked too,
    so a literal ``"Icon-1"`` arriving after two ``"Icon"`` requests becomes
    ``"Icon-1-1"`` instead of colliding.
    """

    def __init__(self, separator: str = '-'):
        self.separator = separator
        self._counts: Dict[str, int] = {}
        self._issued: Set[str] = set()

    def get(self, name: str) -> str:
        """Return a unique name for ``name``."""
        if name not in self._counts and name not in self._issued:
            self._counts[name] = 0
            self._issued.add(name)
            return name

        count = self._counts.get(name, 0)
        while True:
            count += 1
            candidate = f"{name}{self.separator}{count}"
            if candidate not in self._issued:
                break

        self._counts[name] = count
        self._issued.add(candidate)
        return candidate

    @property
    def issued(self) -> FrozenSet[str]:
        return frozenset(self._issued)

    def __contains__(self, name: str) -> bool:
        return name in self._issued

    def __len__(self) -> int:
        return len(self._issued)
