"""
Petrie Walks
============

A Petrie polygon is traced by a flag under the composite change

    φ = change_{R-1} ∘ ... ∘ change_1 ∘ change_0

applied repeatedly. Each round of φ moves the flag to the next edge of the
Petrie polygon; the walk closes when the seed flag comes back.

    polygon (R=2): the Petrie polygon is the polygon itself
    cube:          skew hexagon  (6 edges)
    tetrahedron:   skew square   (4 edges)
    octahedron:    skew hexagon  (6 edges)

Only flags are touched; building the Petrie polygon as a structure of its
own is left to callers.
"""

from typing import List, Optional, Tuple

from ..spec.constants import MIN_PETRIE_RANK
from ..spec.structures import IncidenceStructure
from ..operators.flags import Flag
from ..operators.incidence import assert_sorted


def petrie_flags(structure: IncidenceStructure, flag: Optional[Flag] = None) -> List[Flag]:
    """
    Flags at the start of each round of the Petrie walk.

    Args:
        structure: sorted incidence structure of rank >= 2
        flag: seed flag (default: structure.first_flag())

    Returns:
        list of flags [seed, φ(seed), φ²(seed), ...] up to (excluding) the
        first return to seed

    Raises:
        ValueError: if rank < 2 or the structure is not sorted
    """
    assert_sorted(structure)
    rank = structure.rank().try_index()
    if rank is None or rank < MIN_PETRIE_RANK:
        raise ValueError(f"Petrie walks need rank >= {MIN_PETRIE_RANK}, got rank {structure.rank()}")

    seed = Flag(flag) if flag is not None else structure.first_flag()
    current = seed
    walk = [seed]

    while True:
        for r in range(rank):
            current = current.change(structure, r)
        if current == seed:
            return walk
        walk.append(current)


def petrie_polygon(structure: IncidenceStructure,
                   flag: Optional[Flag] = None) -> Tuple[List[int], List[int]]:
    """
    Vertices and edges visited by the Petrie walk.

    Returns:
        vertices: rank-0 indices in walk order
        edges: rank-1 indices in walk order (edges[k] joins vertices[k]
               and vertices[k+1], cyclically)
    """
    walk = petrie_flags(structure, flag)
    vertices = [f[0] for f in walk]
    edges = [f[1] for f in walk]
    return vertices, edges
