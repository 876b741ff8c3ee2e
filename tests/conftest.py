"""Pytest configuration for wm-trace tests."""

import sys
from pathlib import Path

# Add the repository root and the shared fixtures BEFORE test collection
repo_root = Path(__file__).parent.parent
fixtures_dir = Path(__file__).parent / "wm_trace" / "fixtures"

for path in (fixtures_dir, repo_root):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


def pytest_configure(config):
    """Configure pytest before test collection."""
    for path in (fixtures_dir, repo_root):
        if str(path) not in sys.path:
            sys.path.insert(0, str(path))
