# Copyright 2019-present Kensho Technologies, LLC.
from collections import OrderedDict
from typing import Generic, Hashable, Optional, TypeVar


KT = TypeVar("KT", bound=Hashable)
VT = TypeVar("VT")


class LruMap(Generic[KT, VT]):
    """A map of bounded size that evicts the least-recently-used entry when it is full.

    Entries are kept in the order they were last accessed, least-recently-used first. Looking up
    an entry makes it the most-recently-used one. Entries never expire: they are only evicted to
    make room for new entries.

    The map does no locking. Hosts that share one map between threads and need every key to be
    computed at most once must synchronize access themselves.
    """

    def __init__(self, max_capacity: int) -> None:
        """Create an empty map holding up to max_capacity entries.

        A map with zero capacity retains nothing, so every lookup misses.
        """
        if max_capacity < 0:
            raise AssertionError(
                "Expected a non-negative capacity for the LRU map, but got: {}".format(max_capacity)
            )
        self.max_capacity = max_capacity
        self._entries: "OrderedDict[KT, VT]" = OrderedDict()

    def get(self, key: KT) -> Optional[VT]:
        """Return the value for the key, marking it most-recently-used, or None if it is absent."""
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: KT, value: VT) -> None:
        """Store the value for the key, evicting the least-recently-used entry if necessary."""
        if self.max_capacity == 0:
            return

        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_capacity:
            self._entries.popitem(last=False)
        self._entries[key] = value

    def __contains__(self, key: object) -> bool:
        """Return True if the key has an entry. Does not affect which entry is evicted next."""
        return key in self._entries

    def __len__(self) -> int:
        """Return the number of entries in the map."""
        return len(self._entries)
