"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import io
import os
import sys

# PIP3 modules
import PIL.Image
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

import night_flyer.measure


class FakeMeasurer:
	"""
	Deterministic measurer: text height is a fixed amount per character.
	"""

	def __init__(self, height_per_char: float = 10.0, heights: dict | None = None) -> None:
		self.height_per_char = height_per_char
		self.heights = heights or {}
		self.opaque = night_flyer.measure.DefaultMeasurer()
		self.text_calls = 0

	def measure_text(self, content, style):
		self.text_calls += 1
		if content in self.heights:
			return (style.font_size, self.heights[content])
		return (style.font_size, self.height_per_char * len(content))

	def measure_opaque_bounds(self, image):
		return self.opaque.measure_opaque_bounds(image)


#============================================
def make_logo_image(width: int, height: int, box: tuple[int, int, int, int] | None = None) -> PIL.Image.Image:
	"""
	Build a transparent RGBA image with an optional opaque rectangle.

	Args:
		width: Image width.
		height: Image height.
		box: Opaque region (left, top, right, bottom), exclusive right/bottom.

	Returns:
		PIL image.
	"""
	image = PIL.Image.new("RGBA", (width, height), (0, 0, 0, 0))
	if box is not None:
		left, top, right, bottom = box
		image.paste((255, 0, 0, 255), (left, top, right, bottom))
	return image


def png_bytes(image: PIL.Image.Image) -> bytes:
	buffer = io.BytesIO()
	image.save(buffer, format="PNG")
	return buffer.getvalue()


@pytest.fixture
def fake_measurer() -> FakeMeasurer:
	return FakeMeasurer()


@pytest.fixture
def logo_image_factory():
	return make_logo_image


@pytest.fixture
def png_bytes_factory():
	return png_bytes


@pytest.fixture
def fake_measurer_factory():
	return FakeMeasurer
