"""
Flag Parity and Orientability
=============================

Breadth-first traversal of the flag graph (vertices = flags, edges = flag
changes) that tracks the parity of every flag it reaches.

DEFINITION:
    Seed flag has orientation EVEN. Every flag change flips orientation.
    The structure is ORIENTABLE iff every flag is reached with a single
    consistent parity, i.e. the flag graph restricted to the chosen flag
    changes is bipartite.

ALGORITHM (one try_next() step):
    1. queue empty                        -> DONE
    2. new = change(queue[0], changes[cursor]); advance cursor,
       popping queue[0] when the cursor wraps
    3. new.flag not in found              -> record, enqueue, NEW(flag)
       new.flag in found, parity differs  -> NEW(non-orientable), once
       otherwise                          -> REPEAT

    The iterator protocol loops over try_next() and swallows REPEAT. The
    seed itself is emitted first, before any flag change is applied.

WHY AN EVENT AND NOT A FLAG ATTRIBUTE:
    Non-orientability may only become apparent after the last flag has been
    found, so it cannot be bundled with any particular flag.

MEMORY:
    found[flag] counts how often a flag was reached. A flag is reached once
    per entry of the flag change list (the neighbour across change c applies
    c and lands back on it), so when the count hits len(flag_changes) it can
    never be reached again and its entry is dropped. Without this the map holds every flag,
    which is factorial in rank for regular polytopes.

REFERENCE: McMullen & Schulte, "Abstract Regular Polytopes" (2002), §2B
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, Iterator, Optional, Tuple, Any

from ..spec.constants import RECLAIM_FOUND_FLAGS
from ..spec.structures import IncidenceStructure
from .flags import Flag, FlagChanges, Orientation, OrientedFlag
from .flag_iter import FlagIter
from .incidence import assert_diamond_property, assert_sorted, verify_diamond_property

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlagEvent:
    """Either a newly found OrientedFlag, or (flag=None) the non-orientable event."""

    flag: Optional[OrientedFlag] = None

    @property
    def non_orientable(self) -> bool:
        return self.flag is None

    def flag_or_none(self) -> Optional[OrientedFlag]:
        return self.flag


NON_ORIENTABLE = FlagEvent()


class StepResult(Enum):
    """Outcome of a single OrientedFlagIter.try_next() step."""

    NEW = 'new'          # a new flag event
    REPEAT = 'repeat'    # a flag seen before, nothing to report
    DONE = 'done'        # traversal exhausted


class OrientedFlagIter:
    """
    Iterator over the FlagEvents reachable from a seed flag.

    Attributes:
        orientable: False once a parity contradiction has been found
    """

    def __init__(self,
                 structure: IncidenceStructure,
                 flag_changes: FlagChanges,
                 queue: Deque[OrientedFlag],
                 found: Dict[Flag, Tuple[Orientation, int]],
                 first: bool):
        self.structure = structure
        self.flag_changes = flag_changes
        self.queue = queue
        self.found = found

        # Flag change to apply next to queue[0].
        self.flag_idx = 0

        # Whether the seed has already been returned.
        self.first = first

        self.orientable = True
        self._reclaim_at = len(flag_changes) if RECLAIM_FOUND_FLAGS else None

    @classmethod
    def empty(cls, structure: IncidenceStructure) -> 'OrientedFlagIter':
        """A traversal that yields nothing."""
        return cls(structure, FlagChanges(), deque(), {}, first=True)

    @classmethod
    def new(cls, structure: IncidenceStructure, strict: bool = True) -> 'OrientedFlagIter':
        """
        Traverse every flag from the canonical first flag using all flag changes.

        The nullitope has no flags and gives an empty traversal.
        """
        first_flag = structure.first_oriented_flag()
        if first_flag is None:
            assert_sorted(structure)
            return cls.empty(structure)
        return cls.with_flags(structure, FlagChanges.all(structure.rank()), first_flag, strict=strict)

    @classmethod
    def with_flags(cls,
                   structure: IncidenceStructure,
                   flag_changes: FlagChanges,
                   first_flag: OrientedFlag,
                   strict: bool = True) -> 'OrientedFlagIter':
        """
        Traverse the flags reachable from first_flag using only flag_changes.

        Args:
            structure: sorted incidence structure, borrowed read-only
            flag_changes: ranks at which changes are allowed
            first_flag: seed, emitted first with its own orientation
            strict: if True, verify the diamond property up front

        Raises:
            ValueError: unsorted structure, or a flag change out of range
            DiamondPropertyError: if strict and the diamond property fails
        """
        assert_sorted(structure)
        if strict:
            assert_diamond_property(structure, context="OrientedFlagIter")

        flag_changes = FlagChanges(flag_changes)
        flag_changes.check(structure)

        if structure.rank().try_index() is None:
            return cls.empty(structure)

        if not isinstance(first_flag, OrientedFlag):
            first_flag = OrientedFlag(Flag(first_flag))

        found = {first_flag.flag: (first_flag.orientation, 0)}
        return cls(structure, flag_changes, deque([first_flag]), found, first=False)

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def try_next(self) -> Tuple[StepResult, Optional[FlagEvent]]:
        """
        Apply one flag change to the front of the queue.

        Returns:
            (StepResult.NEW, event), (StepResult.REPEAT, None) or (StepResult.DONE, None)
        """
        if not self.queue:
            return StepResult.DONE, None

        current = self.queue[0]
        new_flag = current.change(self.structure, self.flag_changes[self.flag_idx])

        if self.flag_idx + 1 == len(self.flag_changes):
            self.queue.popleft()
            self.flag_idx = 0
        else:
            self.flag_idx += 1

        entry = self.found.get(new_flag.flag)
        if entry is None:
            self.found[new_flag.flag] = (new_flag.orientation, 1)
            self.queue.append(new_flag)
            return StepResult.NEW, FlagEvent(new_flag)

        orientation, count = entry
        count += 1
        if self._reclaim_at is not None and count == self._reclaim_at:
            del self.found[new_flag.flag]
        else:
            self.found[new_flag.flag] = (orientation, count)

        # Two paths of different parity reach the same flag.
        if self.orientable and new_flag.orientation != orientation:
            self.orientable = False
            logger.debug(f"Non-orientable: flag {list(new_flag.flag)} reached with both parities")
            return StepResult.NEW, NON_ORIENTABLE

        return StepResult.REPEAT, None

    def __iter__(self) -> 'OrientedFlagIter':
        return self

    def __next__(self) -> FlagEvent:
        # The seed is a special case.
        if not self.first:
            self.first = True
            seed = self.queue[0]

            # A point, or no flag changes: the seed is the only flag.
            if self.structure.rank().try_index() == 0 or not self.flag_changes:
                self.queue.clear()

            return FlagEvent(seed)

        while True:
            result, event = self.try_next()
            if result is StepResult.NEW:
                return event
            if result is StepResult.DONE:
                raise StopIteration

    def filter_flags(self) -> Iterator[OrientedFlag]:
        """The same traversal, discarding the non-orientable event."""
        for event in self:
            if not event.non_orientable:
                yield event.flag


# =============================================================================
# CONTRACT-AWARE WRAPPERS
# =============================================================================

def iter_flags(structure: IncidenceStructure, strict: bool = True) -> FlagIter:
    """All flags in canonical order. The structure must be sorted."""
    return FlagIter(structure, strict=strict)


def iter_flag_events(structure: IncidenceStructure, strict: bool = True) -> OrientedFlagIter:
    """All flag events from the canonical first flag. The structure must be sorted."""
    return OrientedFlagIter.new(structure, strict=strict)


def is_orientable(structure: IncidenceStructure, strict: bool = True) -> bool:
    """
    Determine whether a structure is orientable. Sorts it first.

    Stops at the first non-orientable event; an orientable structure needs
    the full traversal to be certain.
    """
    structure.sort()
    for event in OrientedFlagIter.new(structure, strict=strict):
        if event.non_orientable:
            return False
    return True


def build_flags_from_structure(structure: IncidenceStructure) -> Dict[str, Any]:
    """
    Run both flag enumerators on a structure and summarise.

    Args:
        structure: incidence structure (sorted here if needed)

    Returns:
        dict with:
            n_flags: count from FlagIter
            n_oriented_flags: count from OrientedFlagIter (flags only)
            flag_counts_match: the two counts agree
            orientable: no non-orientable event was emitted
            n_non_orientable_events: how many events were emitted (0 or 1)
            el_counts: element counts for ranks -1..R
            diamond: result of verify_diamond_property

    VERIFICATION:
        Fails fast (DiamondPropertyError) on a structure violating the
        diamond property.
    """
    structure.sort()
    diamond = verify_diamond_property(structure)
    if not diamond["valid"]:
        assert_diamond_property(structure, context="build_flags_from_structure")

    n_flags = sum(1 for _ in FlagIter(structure, strict=False))

    traversal = OrientedFlagIter.new(structure, strict=False)
    n_oriented = 0
    n_events = 0
    for event in traversal:
        if event.non_orientable:
            n_events += 1
        else:
            n_oriented += 1

    return {
        'n_flags': n_flags,
        'n_oriented_flags': n_oriented,
        'flag_counts_match': n_flags == n_oriented,
        'orientable': traversal.orientable,
        'n_non_orientable_events': n_events,
        'el_counts': structure.el_counts(),
        'diamond': diamond,
    }


# Self-test when run directly
# Run with: python -m flag_math.operators.parity (from src/)
if __name__ == "__main__":
    from ..spec.structures import IncidenceStructure as _Structure

    print("=" * 60)
    print("FLAG PARITY - VERIFICATION")
    print("=" * 60)

    for n in [3, 4, 5]:
        polygon = _Structure.from_subs([
            [[0]] * n,
            [[i, (i + 1) % n] for i in range(n)],
            [list(range(n))],
        ])
        result = build_flags_from_structure(polygon)
        print(f"\n{n}-gon: flags={result['n_flags']} (expected {2 * n}), "
              f"oriented={result['n_oriented_flags']}, orientable={result['orientable']}")

    print("\n" + "=" * 60)
    print("Verification complete.")
    print("=" * 60)
