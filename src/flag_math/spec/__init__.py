"""Constants, Rank arithmetic and the incidence structure contract."""

from .constants import (
    NULLITOPE_RANK,
    MAX_RANK,
    DIAMOND_SECTION_SIZE,
    IMPLICIT_ELEMENT_IDX,
    MIN_PETRIE_RANK,
    RECLAIM_FOUND_FLAGS,
)
from .rank import Rank, RankVec
from .structures import (
    Element,
    IncidenceStructure,
    DiamondPropertyError,
    validate_structure,
)
