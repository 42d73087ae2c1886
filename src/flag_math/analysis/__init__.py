"""
Analysis functions - depend on operators layer.

Separated from operators to maintain clean layering:
    operators → spec
    analysis → operators → spec

Includes:
- flag_sets: flag orbits under restricted flag changes (omnitruncate support)
- petrie: Petrie walks over flags
"""

from .flag_sets import FlagSet
from .petrie import petrie_flags, petrie_polygon
