from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Tuple

logger = logging.getLogger(__name__)

ALLOC_FAILED = -1

class AddressSpaceError(Exception):
    pass

class InvalidRelease(AddressSpaceError):
    pass

class EmptyFreeList(AddressSpaceError):
    pass

class PartitionViolation(AddressSpaceError, AssertionError):
    pass

@dataclass(frozen=True)
class Block:
    base: int
    length: int

    @property
    def end(self) -> int:
        return self.base + self.length

    def __str__(self) -> str:
        return f"({self.base}, {self.length})"

def _render(blocks: List[Block]) -> str:
    return ' '.join(str(b) for b in blocks)

class AddressSpace:
    """First-fit bookkeeping over [0, capacity).

    Keeps two lists of Blocks, free and allocated, in scan order.
    Allocation failure returns ALLOC_FAILED; misuse raises.
    """
    def __init__(self, capacity: int):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        self.capacity = capacity
        self._free: List[Block] = [Block(0, capacity)]
        self._allocated: List[Block] = []

    @property
    def free_blocks(self) -> Tuple[Block, ...]:
        return tuple(self._free)

    @property
    def allocated_blocks(self) -> Tuple[Block, ...]:
        return tuple(self._allocated)

    def allocate(self, length: int) -> int:
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise ValueError(f"length must be a positive integer, got {length!r}")
        for i, blk in enumerate(self._free):
            if blk.length < length:
                continue
            if blk.length == length:
                del self._free[i]
                self._allocated.append(blk)
            else:
                self._allocated.append(Block(blk.base, length))
                self._free[i] = Block(blk.base + length, blk.length - length)
            logger.debug("allocate(%d) -> %d", length, blk.base)
            return blk.base
        logger.debug("allocate(%d) failed, largest free extent %d", length, self.largest_free_extent())
        return ALLOC_FAILED

    def release(self, address: int) -> None:
        if not self._allocated:
            raise InvalidRelease(f"cannot release {address}: nothing is allocated")
        for i, blk in enumerate(self._allocated):
            if blk.base == address:
                del self._allocated[i]
                self._free.append(blk)
                logger.debug("release(%d) freed %s", address, blk)
                return
        logger.warning("release(%d): no allocated block at this address", address)

    def coalesce(self) -> None:
        """Merge free blocks where an earlier block ends exactly where a later one begins.

        The outer cursor walks the free list; for each position the inner scan
        looks at every later block and restarts after each merge. A right
        neighbour listed before its left neighbour is not picked up, so one call
        can leave a chain partly merged.
        """
        if not self._free:
            raise EmptyFreeList("cannot coalesce: free list is empty")
        free = self._free
        merges = 0
        i = 0
        while i < len(free) - 1:
            j = i + 1
            while j < len(free):
                if free[j].base == free[i].end:
                    free[i] = Block(free[i].base, free[i].length + free[j].length)
                    del free[j]
                    merges += 1
                    j = i + 1
                else:
                    j += 1
            i += 1
        logger.debug("coalesce: %d merges, %d free blocks left", merges, len(free))

    def used(self) -> int:
        return sum(b.length for b in self._allocated)

    def free_bytes(self) -> int:
        return sum(b.length for b in self._free)

    def extents_free(self) -> List[Tuple[int,int]]:
        return [(b.base, b.length) for b in self._free]

    def largest_free_extent(self) -> int:
        return max((b.length for b in self._free), default=0)

    def check_invariants(self) -> None:
        blocks = sorted(self._free + self._allocated, key=lambda b: b.base)
        cursor = 0
        for b in blocks:
            if b.length < 1:
                raise PartitionViolation(f"block {b} has non-positive length")
            if b.base < cursor:
                raise PartitionViolation(f"block {b} overlaps a block ending at {cursor}")
            if b.base > cursor:
                raise PartitionViolation(f"gap [{cursor}, {b.base}) is in neither list")
            cursor = b.end
        if cursor != self.capacity:
            raise PartitionViolation(f"blocks cover [0, {cursor}), capacity is {self.capacity}")

    def __str__(self) -> str:
        return _render(self._free) + "\n" + _render(self._allocated)

    def __repr__(self) -> str:
        return (f"AddressSpace(capacity={self.capacity}, used={self.used()}, "
                f"free_blocks={len(self._free)})")
