"""Pytest configuration for eonet tests.

Adds the workspace root to sys.path so ``eonet`` imports without an install.
Canned payloads and fakes live in ``eonet_fakes``.
"""
import sys
from pathlib import Path

import pytest

workspace_root = Path(__file__).parent.parent.parent
if str(workspace_root) not in sys.path:
    sys.path.insert(0, str(workspace_root))

from eonet_fakes import Router  # noqa: E402


@pytest.fixture
def router() -> Router:
    return Router()
