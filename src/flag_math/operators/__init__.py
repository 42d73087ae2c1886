"""Flag operators - incidence matrices, flag changes, flag enumeration, parity."""

from .incidence import (
    incidence_matrix,
    verify_diamond_property,
    assert_diamond_property,
    assert_sorted,
)

from .flags import (
    Flag,
    FlagChanges,
    Orientation,
    OrientedFlag,
    change_in_place,
)

from .flag_iter import FlagIter

from .parity import (
    FlagEvent,
    NON_ORIENTABLE,
    StepResult,
    OrientedFlagIter,
    iter_flags,
    iter_flag_events,
    is_orientable,
    build_flags_from_structure,
)
