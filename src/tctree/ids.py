# src/tctree/ids.py

"""
Node id allocation for a single tree.
"""


class IdAllocator:
    """
    Hands out strictly increasing node ids, never reusing one.

    With a prefix configured, ids render as ``"<prefix>-<n>"`` so that
    parallel sessions feeding one IDE do not collide.
    """

    def __init__(self, prefix: str | None = None, start: int = 1):
        self.prefix = prefix
        self._next = start
        self._start = start

    @property
    def allocated(self) -> int:
        """Number of ids handed out so far."""
        return self._next - self._start

    def next_id(self) -> int | str:
        value = self._next
        self._next += 1
        if self.prefix is not None:
            return f"{self.prefix}-{value}"
        return value

    def __repr__(self) -> str:
        return f"IdAllocator(prefix={self.prefix!r}, next={self._next})"


# 🔼⚙️
