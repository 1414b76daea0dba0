from __future__ import annotations

import asyncio
import typing as t
import zlib


class StripedLock(object):
    """A fixed pool of asyncio locks partitioned by key hash.

    Mutations on the same key are serialized; keys that fall into different
    stripes proceed independently. A crc32 of the key string is used rather than
    `hash()` so the partitioning is stable across processes.
    """

    def __init__(self, stripes: int = 64) -> None:
        if stripes < 1:
            raise ValueError(f"stripes must be positive: {stripes}")
        self._locks = tuple(asyncio.Lock() for _ in range(stripes))

    def __len__(self) -> int:
        return len(self._locks)

    def stripe(self, key: t.Hashable) -> int:
        return zlib.crc32(str(key).encode("utf-8")) % len(self._locks)

    def lock_for(self, key: t.Hashable) -> asyncio.Lock:
        return self._locks[self.stripe(key)]
