"""
FlagIter - Exhaustive Flag Enumeration
======================================

Lazy, one-shot enumeration of every flag of a sorted structure.

ORDER:
    Each flag f corresponds to a position vector p where p[r] is the position
    of f[r] inside subs(f[r+1]) (NOT its index in rank r). Flags come out in
    lexicographic order of p read from the top rank down, i.e. p[0] varies
    fastest.

ODOMETER STEP:
    r = 0
    while p[r] is the last position in subs(f[r+1]):
        p[r] = 0; r += 1                (carry)
        if r == R: exhausted
    p[r] += 1                           (pivot)
    for k = r .. 0:
        f[k] = subs(f[k+1])[p[k]]       (rebuild below the pivot)

Use FlagIter when orientation does not matter and every flag is wanted;
use OrientedFlagIter to restrict flag changes or track parity.
"""

from typing import List, Optional

from ..spec.structures import IncidenceStructure
from .flags import Flag, get_or_zero
from .incidence import assert_diamond_property, assert_sorted


class FlagIter:
    """
    Iterator over all Flags of a structure. Works for compounds too.

    Not restartable: build a new FlagIter to enumerate again.
    """

    def __init__(self, structure: IncidenceStructure, strict: bool = True):
        """
        Args:
            structure: sorted incidence structure, borrowed read-only
            strict: if True, verify the diamond property up front

        Raises:
            ValueError: if the structure is not sorted
            DiamondPropertyError: if strict and the diamond property fails
        """
        assert_sorted(structure)
        if strict:
            assert_diamond_property(structure, context="FlagIter")

        self.structure = structure
        self.rank = structure.rank().try_index() or 0

        first = structure.first_flag()
        self.flag: Optional[List[int]] = list(first) if first is not None else None

        # Positions of each flag entry inside its superelement's subs list.
        self.indices: List[int] = [0] * self.rank

    def __iter__(self) -> 'FlagIter':
        return self

    def __next__(self) -> Flag:
        if self.flag is None:
            raise StopIteration

        flag = self.flag
        prev_flag = Flag(flag)

        # Find the lowest rank whose counter can still advance.
        r = 0
        while True:
            if r == self.rank:
                self.flag = None
                return prev_flag

            above = self.structure.get_element(r + 1, get_or_zero(flag, r + 1))
            if self.indices[r] + 1 == len(above.subs):
                self.indices[r] = 0
                r += 1
            else:
                self.indices[r] += 1
                break

        # Rebuild entries r..0 from the pivot downwards.
        element = self.structure.get_element(r + 1, get_or_zero(flag, r + 1))
        while True:
            flag[r] = element.subs[self.indices[r]]
            if r == 0:
                break
            element = self.structure.get_element(r, flag[r])
            r -= 1

        return prev_flag
