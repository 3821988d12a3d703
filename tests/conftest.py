"""Shared test fixtures and helpers for handpose tests."""

import importlib.util
import sys
from pathlib import Path

import numpy as np
import pytest

from handpose.anchors import AnchorTable

# Load helpers module from the tests directory using importlib so test
# modules can ``from helpers import ...`` regardless of rootdir.
_helpers_path = Path(__file__).resolve().parent / "helpers.py"
_spec = importlib.util.spec_from_file_location("helpers", _helpers_path)
_helpers = importlib.util.module_from_spec(_spec)
sys.modules["helpers"] = _helpers
_spec.loader.exec_module(_helpers)

from helpers import INPUT_SIZE  # noqa: E402


@pytest.fixture
def anchors():
    """Four anchors; row 0 sits at the image center."""
    return AnchorTable([(0.5, 0.5), (0.25, 0.25), (0.75, 0.75), (0.1, 0.9)])


@pytest.fixture
def frame():
    """Blank 256x256 RGB frame."""
    return np.zeros((INPUT_SIZE, INPUT_SIZE, 3), dtype=np.uint8)
