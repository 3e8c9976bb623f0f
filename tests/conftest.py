"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

BADGE_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="100" height="30">
	<rect x="0" y="0" width="100" height="30" fill="#eeeeee"/>
	<text x="10" y="20" font-size="20">Name</text>
</svg>
"""


class StubMeasurer:
	"""
	Deterministic metrics: width is proportional to font size and length.
	"""

	def __init__(self, factor: float = 0.5):
		self.factor = factor
		self.calls = 0

	def measure(self, text: str, font_size: float, font_name: str) -> float:
		self.calls += 1
		return self.factor * font_size * len(text)

	def vertical_extent(self, font_size: float, font_name: str) -> tuple[float, float]:
		return (0.8 * font_size, -0.2 * font_size)


#============================================
@pytest.fixture
def stub_measurer() -> StubMeasurer:
	"""
	Provide a fresh deterministic text measurer.
	"""
	return StubMeasurer()


#============================================
@pytest.fixture
def badge_svg() -> str:
	"""
	Provide a 100 x 30 template with one text placeholder.
	"""
	return BADGE_SVG
