"""
Pytest configuration for local imports and shared fixtures.
"""

import os
import sys

import pytest


def _ensure_repo_on_path() -> None:
    """
    Ensure the repository root is on sys.path.
    """
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_ensure_repo_on_path()

from kdp_cover.models.design import BookMetadata  # noqa: E402
from kdp_cover.renderer.fonts import FontRegistry  # noqa: E402

CHAR_WIDTH = 6.0


def fixed_measure(text: str) -> float:
    """Monospace stand-in for font metrics: every character is 6 px wide."""
    return CHAR_WIDTH * len(text)


@pytest.fixture
def measure():
    return fixed_measure


@pytest.fixture(scope="session")
def fonts():
    return FontRegistry()


@pytest.fixture
def book():
    return BookMetadata(
        title="The Lighthouse Keeper",
        author="M. Lane",
        page_count=200,
        trim_size="6x9",
        paper_type="white",
    )
