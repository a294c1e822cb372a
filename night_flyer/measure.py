"""
Measurement capability for text runs and opaque image bounds.
"""

# Standard Library
import dataclasses
import typing

# PIP3 modules
import PIL.Image
import reportlab.pdfbase.pdfmetrics

# local repo modules
import night_flyer as nf
import night_flyer.config


ALPHA_THRESHOLD = nf.config.ALPHA_THRESHOLD
LABEL_FONT_NAME = nf.config.LABEL_FONT_NAME
LABEL_FONT_SIZE = nf.config.LABEL_FONT_SIZE
LABEL_LETTER_SPACING_EM = nf.config.LABEL_LETTER_SPACING_EM


@dataclasses.dataclass(frozen=True)
class TextStyle:
	font_name: str = LABEL_FONT_NAME
	font_size: float = LABEL_FONT_SIZE
	letter_spacing_em: float = LABEL_LETTER_SPACING_EM
	vertical: bool = True


class Measurer(typing.Protocol):
	def measure_text(self, content: str, style: TextStyle) -> tuple[float, float]:
		...

	def measure_opaque_bounds(self, image: PIL.Image.Image) -> tuple[int, int, int, int] | None:
		...


class DefaultMeasurer:
	"""
	Measurer backed by reportlab font metrics and Pillow alpha scans.
	"""

	def __init__(self, alpha_threshold: int = ALPHA_THRESHOLD) -> None:
		self.alpha_threshold = alpha_threshold

	#============================================
	def measure_text(self, content: str, style: TextStyle) -> tuple[float, float]:
		"""
		Measure a single-line text run.

		For vertical writing the glyph advances stack along the height and the
		line thickness becomes the width.

		Args:
			content: Text to measure.
			style: Font, size, and spacing.

		Returns:
			Tuple of (width, height).
		"""
		if not content:
			return (0.0, 0.0)
		advance = reportlab.pdfbase.pdfmetrics.stringWidth(content, style.font_name, style.font_size)
		advance += style.letter_spacing_em * style.font_size * len(content)
		ascent = reportlab.pdfbase.pdfmetrics.getAscent(style.font_name) * style.font_size / 1000.0
		descent = reportlab.pdfbase.pdfmetrics.getDescent(style.font_name) * style.font_size / 1000.0
		thickness = ascent - descent
		if style.vertical:
			return (thickness, advance)
		return (advance, thickness)

	#============================================
	def measure_opaque_bounds(self, image: PIL.Image.Image) -> tuple[int, int, int, int] | None:
		"""
		Find the tight box of pixels whose alpha exceeds the threshold.

		Args:
			image: PIL image in any mode.

		Returns:
			Inclusive (min_x, min_y, max_x, max_y) or None if nothing is opaque.
		"""
		threshold = self.alpha_threshold
		rgba = image if image.mode == "RGBA" else image.convert("RGBA")
		alpha = rgba.getchannel("A")
		mask = alpha.point(lambda value: 255 if value > threshold else 0)
		bbox = mask.getbbox()
		if bbox is None:
			return None
		left, top, right, bottom = bbox
		return (left, top, right - 1, bottom - 1)
