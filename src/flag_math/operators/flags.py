"""
Flags, Flag Changes and Orientation
===================================

A flag is a maximal chain of pairwise incident elements. We store only the
ranks 0..R-1; the minimal and maximal elements are implicit (index 0 of
their rank) but get_or_zero() lets code pretend they are there.

FLAG CHANGE at position r:
    below = flag[r-1]   (minimal element if r = 0)
    above = flag[r+1]   (maximal element if r = R-1)
    section = sups(below) ∩ subs(above)          (sorted merge)
    |section| = 2 by the diamond property
    flag[r] <- the element of section that is not flag[r]

    Involution: change(change(f, r), r) = f.
    No-op on a point (R = 0).

ORIENTATION:
    Two-valued parity tag, flipped by every flag change. Identity of a flag
    is its element indices only; OrientedFlag carries the parity alongside.
    Traversals key their bookkeeping on OrientedFlag.flag, never on the
    oriented pair, so "same flag, other parity" is visible as a mismatch.
"""

import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence, Union

from ..spec.constants import DIAMOND_SECTION_SIZE, IMPLICIT_ELEMENT_IDX
from ..spec.rank import Rank
from ..spec.structures import IncidenceStructure, DiamondPropertyError


def common(sorted_a: Sequence[int], sorted_b: Sequence[int]) -> List[int]:
    """
    Common entries of two ascending lists (merge walk, O(len a + len b)).
    """
    out = []
    i = j = 0
    while i < len(sorted_a) and j < len(sorted_b):
        a, b = sorted_a[i], sorted_b[j]
        if a == b:
            out.append(a)
            i += 1
            j += 1
        elif a < b:
            i += 1
        else:
            j += 1
    return out


def get_or_zero(indices: Sequence[int], rank: Union[Rank, int]) -> int:
    """Entry of a flag at a rank, or the implicit element index outside 0..R-1."""
    r = Rank.coerce(rank).try_index()
    if r is None or r >= len(indices):
        return IMPLICIT_ELEMENT_IDX
    return indices[r]


def change_in_place(structure: IncidenceStructure, indices: List[int], r: int) -> None:
    """
    Apply the flag change at position r to a mutable list of indices.

    Args:
        structure: sorted incidence structure
        indices: flag entries for ranks 0..R-1, modified in place
        r: position to change, 0 <= r < R

    Raises:
        ValueError: if r is out of range or the structure is the nullitope
        DiamondPropertyError: if the section at r does not have exactly 2 elements
    """
    rank = structure.rank().try_index()
    if rank is None:
        raise ValueError("Can't change flags of the nullitope")

    # Nothing to swap in a point.
    if rank == 0:
        return

    if r < 0 or r >= rank:
        raise ValueError(f"Flag change position must satisfy 0 <= r < {rank}, got {r}")

    below_idx = get_or_zero(indices, r - 1)
    above_idx = get_or_zero(indices, r + 1)
    below = structure.get_element(r - 1, below_idx)
    above = structure.get_element(r + 1, above_idx)

    section = common(below.sups, above.subs)
    if len(section) != DIAMOND_SECTION_SIZE:
        raise DiamondPropertyError(
            f"Diamond property fails between rank {r - 1} index {below_idx} "
            f"and rank {r + 1} index {above_idx}: section {section} has "
            f"{len(section)} elements, expected {DIAMOND_SECTION_SIZE}"
        )

    indices[r] = section[1] if indices[r] == section[0] else section[0]


class Flag(tuple):
    """Element indices of a flag, ranks 0..R-1. Immutable and hashable."""

    def get_or_zero(self, rank: Union[Rank, int]) -> int:
        return get_or_zero(self, rank)

    def change(self, structure: IncidenceStructure, r: int) -> 'Flag':
        """Return the flag obtained by the flag change at position r."""
        indices = list(self)
        change_in_place(structure, indices, r)
        return Flag(indices)

    def __repr__(self) -> str:
        return f"Flag({list(self)})"


class Orientation(Enum):
    """Parity of a flag. Flips on every flag change."""

    EVEN = 0
    ODD = 1

    def flip(self) -> 'Orientation':
        return Orientation.ODD if self is Orientation.EVEN else Orientation.EVEN

    @property
    def sign(self) -> float:
        """+1.0 for EVEN, -1.0 for ODD (used by signed-volume code)."""
        return 1.0 if self is Orientation.EVEN else -1.0


@dataclass(frozen=True)
class OrientedFlag:
    """
    A Flag together with its Orientation.

    If the structure is non-orientable, orientation is garbage once the
    traversal has reported the non-orientable event.
    """

    flag: Flag
    orientation: Orientation = field(default=Orientation.EVEN)

    def change(self, structure: IncidenceStructure, r: int) -> 'OrientedFlag':
        return OrientedFlag(self.flag.change(structure, r), self.orientation.flip())


class FlagChanges(tuple):
    """
    Ranks at which a traversal may change flags.

    Order does not affect which flags are reachable, only the order in which
    they are discovered.
    """

    @classmethod
    def all(cls, rank: Union[Rank, int]) -> 'FlagChanges':
        """All flag changes 0..R-1 for a structure of rank R (none for R <= 0)."""
        r = Rank.coerce(rank).try_index() or 0
        return cls(range(r))

    def subsets(self) -> Iterator['FlagChanges']:
        """For each position, a copy with that single flag change removed."""
        for i in range(len(self)):
            yield FlagChanges(self[:i] + self[i + 1:])

    def check(self, structure: IncidenceStructure) -> None:
        """
        Raise ValueError if any change is outside 0..R-1.

        Duplicate changes are legal but only repeat work, so they warn.
        """
        rank = structure.rank().try_index() or 0
        bad = [r for r in self if r < 0 or r >= rank]
        if bad:
            raise ValueError(f"Flag changes {bad} out of range [0, {rank}) for rank {rank}")
        if len(set(self)) != len(self):
            warnings.warn(
                f"Duplicate flag changes {list(self)}: each duplicate is applied again for every flag.",
                UserWarning
            )

    def __repr__(self) -> str:
        return f"FlagChanges({list(self)})"
