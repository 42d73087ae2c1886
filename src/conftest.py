"""
Pytest Configuration
====================

Automatically loaded by pytest. Adds src/ to sys.path so flag_math is
importable without installation, and quiets the per-orbit debug logging
unless a test asks for it.

Usage:
    cd src
    pytest tests/ -v
"""

import logging
import sys
from pathlib import Path


def pytest_configure(config):
    """Add src/ to path before any imports happen."""
    src_root = Path(__file__).parent
    if str(src_root) not in sys.path:
        sys.path.insert(0, str(src_root))
    logging.getLogger("flag_math").setLevel(logging.INFO)


# Also do it at module level for non-pytest usage
src_root = Path(__file__).parent
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))
