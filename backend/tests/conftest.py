"""
backend/tests/conftest.py

Purpose:
    Shared pytest bootstrap: makes the ``app`` package importable when the
    suite runs from the repository root or from backend/.
"""

from __future__ import annotations

import sys
from pathlib import Path

_BACKEND_DIR = Path(__file__).resolve().parents[1]

if str(_BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(_BACKEND_DIR))
