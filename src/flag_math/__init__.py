"""
FLAG_MATH - Flag enumeration and orientability for abstract polytopes
=====================================================================

NO geometry. NO coordinates. NO rendering.

Structure:
    spec/       - Constants, Rank arithmetic, incidence structure contract
    operators/  - Incidence matrices, flag changes, FlagIter, OrientedFlagIter
    analysis/   - Flag orbits (FlagSet), Petrie walks

Every enumerator takes an IncidenceStructure that has been sort()ed and
satisfies the diamond property. Enumerators are lazy and one-shot.

Requirements:
    Python >= 3.9
    numpy >= 1.20
    scipy >= 1.8
"""

import sys

# Python version check
if sys.version_info < (3, 9):
    raise ImportError(f"flag_math requires Python >= 3.9, got {sys.version}")

# scipy version check (sparse incidence products)
import scipy
_scipy_version = tuple(int(p) for p in scipy.__version__.split('.')[:2] if p.isdigit())
if _scipy_version < (1, 8):
    raise ImportError(f"flag_math requires scipy >= 1.8, got {scipy.__version__}")

# numpy version check
import numpy as np
_numpy_version = tuple(int(p) for p in np.__version__.split('.')[:2] if p.isdigit())
if _numpy_version < (1, 20):
    raise ImportError(f"flag_math requires numpy >= 1.20, got {np.__version__}")

__version__ = "0.1.0"

from . import spec
from . import operators
from . import analysis
