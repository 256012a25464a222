"""Disjoint-set union over the integers 0, 1, ..., size - 1."""

from typing import List


class UnionFind:
    """
    Union-by-rank with path compression.

    When two roots of equal rank are merged the root of the second
    argument becomes the new root and its rank is incremented.

    Example:
        >>> uf = UnionFind(4)
        >>> uf.union(0, 1)
        >>> uf.find(0) == uf.find(1)
        True
        >>> uf.find(2) == uf.find(3)
        False
    """

    def __init__(self, size: int):
        self._parent: List[int] = list(range(size))
        self._rank: List[int] = [0] * size

    def __len__(self) -> int:
        return len(self._parent)

    def find(self, x: int) -> int:
        """Return the representative of the component containing ``x``."""
        root = x
        parent = self._parent
        while parent[root] != root:
            root = parent[root]
        # path compression
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    def union(self, x: int, y: int) -> None:
        """Merge the components of ``x`` and ``y``."""
        a = self.find(x)
        b = self.find(y)
        if a == b:
            return
        if self._rank[a] > self._rank[b]:
            self._parent[b] = a
        elif self._rank[a] < self._rank[b]:
            self._parent[a] = b
        else:
            self._parent[a] = b
            self._rank[b] += 1

    def connected(self, x: int, y: int) -> bool:
        return self.find(x) == self.find(y)

    def rank(self, x: int) -> int:
        return self._rank[x]
