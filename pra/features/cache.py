"""
Feature Vector Cache Module.

Concurrent map from instance to its matrix row (or None, for instances
with no features), shared by the worker threads of online training.

The map is lock-striped: keys hash to one of several stripes, each a dict
with its own lock, so threads working on different instances rarely
contend and callers never lock anything themselves.
"""

import threading
from typing import Dict, Hashable, List, Optional, Tuple

from .matrix import MatrixRow


class FeatureVectorCache:
    """
    Lock-striped instance -> Optional[MatrixRow] map with hit statistics.

    A stored None is a cached result ("no features"), distinct from a key
    that was never stored; use lookup to tell them apart.

    Example:
        >>> cache = FeatureVectorCache()
        >>> found, row = cache.lookup(instance)
        >>> if not found:
        ...     row = generator.construct_matrix_row(instance)
        ...     cache.put(instance, row)
    """

    def __init__(self, num_stripes: int = 16):
        """
        Initialize cache.

        Args:
            num_stripes: Number of independently locked partitions
        """
        if num_stripes < 1:
            raise ValueError(f"num_stripes must be positive, got {num_stripes}")
        self.num_stripes = num_stripes
        self._stripes: List[Dict[Hashable, Optional[MatrixRow]]] = [
            {} for _ in range(num_stripes)
        ]
        self._locks = [threading.Lock() for _ in range(num_stripes)]

        # Statistics
        self.hits: int = 0
        self.misses: int = 0

    def _index(self, key: Hashable) -> int:
        return hash(key) % self.num_stripes

    def lookup(self, key: Hashable) -> Tuple[bool, Optional[MatrixRow]]:
        """
        Get a cached row.

        Returns:
            (found, row); row may be None even when found
        """
        index = self._index(key)
        with self._locks[index]:
            stripe = self._stripes[index]
            if key in stripe:
                self.hits += 1
                return True, stripe[key]
            self.misses += 1
            return False, None

    def put(self, key: Hashable, row: Optional[MatrixRow]) -> None:
        index = self._index(key)
        with self._locks[index]:
            self._stripes[index][key] = row

    def __contains__(self, key: Hashable) -> bool:
        index = self._index(key)
        with self._locks[index]:
            return key in self._stripes[index]

    def __len__(self) -> int:
        total = 0
        for lock, stripe in zip(self._locks, self._stripes):
            with lock:
                total += len(stripe)
        return total

    def values(self) -> List[Optional[MatrixRow]]:
        """Snapshot of every cached value, in stripe order."""
        result: List[Optional[MatrixRow]] = []
        for lock, stripe in zip(self._locks, self._stripes):
            with lock:
                result.extend(stripe.values())
        return result

    def rows(self) -> List[MatrixRow]:
        """Snapshot of the cached rows that are not None."""
        return [row for row in self.values() if row is not None]

    def clear(self) -> None:
        for lock, stripe in zip(self._locks, self._stripes):
            with lock:
                stripe.clear()

    def get_statistics(self) -> Dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with size, hits, misses and hit rate
        """
        total_requests = self.hits + self.misses
        return {
            'size': len(self),
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': self.hits / total_requests if total_requests > 0 else 0,
        }

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (f"FeatureVectorCache(size={stats['size']}, "
                f"hit_rate={stats['hit_rate']:.2%})")
