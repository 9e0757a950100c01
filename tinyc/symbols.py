"""Symbol table — flat global variable space with dense memory offsets."""

from __future__ import annotations


class SymbolTable:
    """Maps variable names to GP-relative offsets in first-reference order.

    Offsets start at 0 and are never renumbered. There is no scoping: every
    name is global and exists from its first mention onward.
    """

    def __init__(self) -> None:
        self.offsets: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.offsets)

    def lookup(self, name: str) -> int | None:
        """Offset of name, or None if it has not been allocated."""
        return self.offsets.get(name)

    def insert(self, name: str) -> int | None:
        """Allocate the next offset for name. Returns None if already present."""
        if name in self.offsets:
            return None
        offset = len(self.offsets)
        self.offsets[name] = offset
        return offset

    def resolve(self, name: str) -> int:
        """Offset of name, allocating one on first reference."""
        offset = self.lookup(name)
        if offset is None:
            offset = self.insert(name)
            assert offset is not None
        return offset
