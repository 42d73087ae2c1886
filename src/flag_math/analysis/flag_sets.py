"""
Flag Sets - Orbits of Flags under Restricted Flag Changes
=========================================================

A FlagSet is the set of flags reachable from a seed using only a given
FlagChanges. With all flag changes this is the whole flag set of a
connected polytope.

SUB-ORBITS:
    Removing flag change r splits an orbit into sub-orbits. For a connected
    polytope, the sub-orbits of the full flag set under "all changes but r"
    correspond one-to-one with the elements of rank r: flags sharing their
    rank-r element are exactly those connected without changing it.

    FlagSet.subsets() performs this split for every r at once; the
    omnitruncate builds its elements from these orbits.

EQUALITY (narrow on purpose):
    Two FlagSets compare equal when they were generated by the same
    FlagChanges and one flag of the first lies in the second. For orbits
    under identical changes this IS orbit equality (orbits are disjoint or
    equal), but it is NOT general set equality. Use same_orbit() to make
    the intent explicit.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Set

from ..spec.structures import IncidenceStructure
from ..operators.flags import Flag, FlagChanges, OrientedFlag
from ..operators.parity import OrientedFlagIter

logger = logging.getLogger(__name__)


class FlagSet:
    """
    Flags (orientation discarded) together with the changes that generated them.

    Attributes:
        flags: set of Flag
        flag_changes: FlagChanges used to generate the orbit
    """

    def __init__(self, flags: Iterable[Flag], flag_changes: FlagChanges):
        self.flags: Set[Flag] = set(flags)
        self.flag_changes = FlagChanges(flag_changes)

    @classmethod
    def new(cls, structure: IncidenceStructure, strict: bool = True) -> 'FlagSet':
        """
        Orbit of the canonical first flag under all flag changes.

        The nullitope gives an empty FlagSet.
        """
        flag_changes = FlagChanges.all(structure.rank())
        first_flag = structure.first_flag()
        if first_flag is None:
            return cls((), flag_changes)
        return cls.with_flags(structure, flag_changes, first_flag, strict=strict)

    @classmethod
    def with_flags(cls,
                   structure: IncidenceStructure,
                   flag_changes: FlagChanges,
                   first_flag: Flag,
                   strict: bool = True) -> 'FlagSet':
        """
        All flags obtained by repeatedly applying any of flag_changes to first_flag.

        Args:
            structure: sorted incidence structure
            flag_changes: allowed flag changes
            first_flag: seed flag
            strict: if True, verify the diamond property up front

        Returns:
            FlagSet containing first_flag and everything reachable from it
        """
        traversal = OrientedFlagIter.with_flags(
            structure, flag_changes, OrientedFlag(Flag(first_flag)), strict=strict
        )
        return cls((oriented.flag for oriented in traversal.filter_flags()), flag_changes)

    def subsets(self, structure: IncidenceStructure) -> List['FlagSet']:
        """
        Split this set into orbits under each flag-change set missing one change.

        For each subset of flag_changes (one change removed), seeds an orbit
        from every flag of self not yet covered by a previous orbit of that
        subset. Parent flags are visited in sorted order, so the result is
        deterministic.

        Returns:
            list of FlagSets, grouped by removed change in flag_changes order
        """
        subsets = []

        for flag_changes in self.flag_changes.subsets():
            covered: Set[Flag] = set()
            n_orbits = 0

            for flag in sorted(self.flags):
                if flag in covered:
                    continue
                subset = FlagSet.with_flags(structure, flag_changes, flag, strict=False)
                covered |= subset.flags
                subsets.append(subset)
                n_orbits += 1

            logger.debug(f"FlagSet.subsets: changes {list(flag_changes)} -> {n_orbits} orbits")

        return subsets

    def same_orbit(self, other: 'FlagSet') -> bool:
        """
        Weak comparison: same flag changes and one of our flags is in other.

        Only meaningful for orbits generated under identical flag changes
        (e.g. omnitruncate elements). Two empty sets with the same changes
        compare equal.
        """
        if tuple(self.flag_changes) != tuple(other.flag_changes):
            return False
        if not self.flags:
            return not other.flags
        flag = next(iter(self.flags))
        return flag in other.flags

    def __eq__(self, other) -> bool:
        if not isinstance(other, FlagSet):
            return NotImplemented
        return self.same_orbit(other)

    __hash__ = None

    def is_empty(self) -> bool:
        return not self.flags

    def first(self) -> Optional[Flag]:
        """Smallest flag in the set, or None if empty."""
        return min(self.flags) if self.flags else None

    def __len__(self) -> int:
        return len(self.flags)

    def __contains__(self, flag) -> bool:
        return Flag(flag) in self.flags

    def __iter__(self) -> Iterator[Flag]:
        return iter(sorted(self.flags))

    def __repr__(self) -> str:
        return f"FlagSet(n_flags={len(self.flags)}, flag_changes={list(self.flag_changes)})"
