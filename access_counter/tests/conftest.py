"""Pytest config to ensure project root is on sys.path during test collection.

Some environments run pytest with a different working directory which can
lead to "No module named 'access_counter'" import errors. This file ensures
the repository root is available to the test process.
"""
import os
import sys

import pytest

_HERE = os.path.dirname(__file__)
_ROOT = os.path.abspath(os.path.join(_HERE, ".."))  # access_counter/
PROJECT_ROOT = os.path.abspath(os.path.join(_ROOT, ".."))  # repo root

# Insert project root at front of sys.path if not already present
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing the secret file at a path that does not exist yet."""
    from access_counter.config import Settings

    return Settings(secret_file=str(tmp_path / "redis-config"))
