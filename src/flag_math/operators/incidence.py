"""
Incidence Matrices and the Diamond Property
===========================================

Pure combinatorics - NO geometry.

DEFINITIONS:
    A_r: (n_{r-1} × n_r) sparse 0/1 matrix, A_r[i, j] = 1 iff element i of
         rank r-1 is a subelement of element j of rank r.

    For a flag position r (0 <= r < R) the product

        S_r = A_r @ A_{r+1}     shape (n_{r-1} × n_{r+1})

    counts, for each pair (lower, upper) two ranks apart, the rank-r elements
    lying between them.

DIAMOND PROPERTY:
    Every nonzero entry of every S_r equals 2.

    Zero entries are pairs that are not incident. A nonzero entry other than
    2 means a flag change at rank r is undefined for any flag through that
    section, so flag traversal cannot proceed.

This is the check the flag enumerators run (strict=True) at the moment a
structure is handed to them. The flag-change step re-checks the one
section it touches, so a structure that skipped verification still fails
loudly instead of producing wrong flags.

REFERENCE: McMullen & Schulte, "Abstract Regular Polytopes" (2002), §2A
"""

import numpy as np
from scipy import sparse
from typing import Dict, Any, Union

from ..spec.constants import DIAMOND_SECTION_SIZE
from ..spec.rank import Rank
from ..spec.structures import IncidenceStructure, DiamondPropertyError


def incidence_matrix(structure: IncidenceStructure,
                     rank: Union[Rank, int]) -> sparse.csr_matrix:
    """
    Build A_r: subelement incidence between ranks r-1 and r.

    Args:
        structure: incidence structure
        rank: r, with 0 <= r <= R

    Returns:
        A: (n_{r-1}, n_r) sparse matrix with A[i, j] = 1 iff i ∈ subs(j)

    PROPERTY:
        Column j has len(subs(j)) nonzeros; row i has len(sups(i)) nonzeros.
    """
    r = int(rank)
    top = int(structure.rank())
    if r < 0 or r > top:
        raise ValueError(f"Incidence matrix needs 0 <= r <= {top}, got r={r}")

    n_below = structure.el_count(r - 1)
    elements = structure[r]

    rows = []
    cols = []
    for j, el in enumerate(elements):
        rows.extend(el.subs)
        cols.extend([j] * len(el.subs))

    data = np.ones(len(rows), dtype=np.int64)
    return sparse.csr_matrix((data, (rows, cols)), shape=(n_below, len(elements)))


def verify_diamond_property(structure: IncidenceStructure) -> Dict[str, Any]:
    """
    Universal check: every height-2 section has exactly 2 middle elements.

    Args:
        structure: incidence structure (sorted or not)

    Returns:
        dict with:
            'valid': bool - every section has DIAMOND_SECTION_SIZE elements
            'n_sections': int - number of incident (lower, upper) pairs checked
            'histogram': dict - {section size: number of sections}
            'violations': list of (r, lower_idx, upper_idx, size), first few only

    NOTE:
        Nullitope and point have no flag positions and are trivially valid.
    """
    top = structure.rank().try_index()
    histogram: Dict[int, int] = {}
    violations = []
    n_sections = 0

    for r in range(top or 0):
        S = (incidence_matrix(structure, r) @ incidence_matrix(structure, r + 1)).tocoo()
        S.sum_duplicates()
        n_sections += S.nnz

        unique, counts = np.unique(S.data, return_counts=True)
        for u, c in zip(unique, counts):
            histogram[int(u)] = histogram.get(int(u), 0) + int(c)

        bad = np.where(S.data != DIAMOND_SECTION_SIZE)[0]
        for k in bad[:10 - len(violations)]:
            violations.append((r, int(S.row[k]), int(S.col[k]), int(S.data[k])))

    return {
        'valid': all(size == DIAMOND_SECTION_SIZE for size in histogram),
        'n_sections': n_sections,
        'histogram': histogram,
        'violations': violations,
    }


def assert_diamond_property(structure: IncidenceStructure, context: str = "") -> None:
    """
    Fail-fast version of verify_diamond_property.

    Call this wherever a structure enters the flag engine.

    Args:
        structure: incidence structure
        context: optional context string for error message

    Raises:
        DiamondPropertyError: if any section does not have exactly 2 elements
    """
    result = verify_diamond_property(structure)
    if not result['valid']:
        ctx = f" [{context}]" if context else ""
        r, lo, hi, size = result['violations'][0]
        raise DiamondPropertyError(
            f"Diamond property violated{ctx}: "
            f"section between rank {r - 1} index {lo} and rank {r + 1} index {hi} "
            f"has {size} elements, expected {DIAMOND_SECTION_SIZE}. "
            f"Histogram: {result['histogram']}"
        )


def assert_sorted(structure: IncidenceStructure) -> None:
    """Flag enumeration relies on sorted subs/sups lists."""
    if not structure.sorted:
        raise ValueError(
            "Structure must be sorted before iterating over its flags; call structure.sort() first."
        )


# Self-test when run directly
# Run with: python -m flag_math.operators.incidence (from src/)
if __name__ == "__main__":
    print("=" * 60)
    print("DIAMOND PROPERTY - VERIFICATION")
    print("=" * 60)

    # Square, then a triangle with a doubled edge
    square = IncidenceStructure.from_subs([
        [[0]] * 4,
        [[0, 1], [1, 2], [2, 3], [0, 3]],
        [[0, 1, 2, 3]],
    ])
    broken = IncidenceStructure.from_subs([
        [[0]] * 3,
        [[0, 1], [1, 2], [0, 2], [0, 1]],
        [[0, 1, 2, 3]],
    ])

    for name, structure in [("square", square), ("doubled-edge triangle", broken)]:
        result = verify_diamond_property(structure)
        print(f"\n=== {name} ===")
        print(f"  el_counts  = {structure.el_counts()}")
        print(f"  sections   = {result['n_sections']}")
        print(f"  histogram  = {result['histogram']}")
        print(f"  valid      = {result['valid']}")
        for r, lo, hi, size in result['violations']:
            print(f"  violation: rank {r - 1} idx {lo} / rank {r + 1} idx {hi} -> {size} elements")

    print("\n" + "=" * 60)
    print("Verification complete.")
    print("=" * 60)
