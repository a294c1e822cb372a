"""
Opaque bounding-box analysis for logo images.
"""

# Standard Library
import dataclasses
import typing

# PIP3 modules
import PIL.Image

# local repo modules
import night_flyer as nf
import night_flyer.config
import night_flyer.logo_lib
import night_flyer.measure


Logo = nf.logo_lib.Logo
Measurer = nf.measure.Measurer

DEFAULT_IMAGE_SIZE = nf.config.DEFAULT_IMAGE_SIZE
WIDE_ASPECT_RATIO = nf.config.WIDE_ASPECT_RATIO

LogoLoader = typing.Callable[[Logo], typing.Awaitable[PIL.Image.Image]]


@dataclasses.dataclass(frozen=True)
class BoundingBoxResult:
	pixel_width: int
	pixel_height: int
	bbox_width: int
	bbox_height: int

	@property
	def bbox_max(self) -> int:
		return max(self.bbox_width, self.bbox_height)

	@property
	def aspect_ratio(self) -> float:
		if self.bbox_height <= 0:
			return 0.0
		return self.bbox_width / self.bbox_height


#============================================
def full_extent_result(width: int | None, height: int | None) -> BoundingBoxResult:
	"""
	Build a result that covers the whole image.

	Args:
		width: Natural width or None when unknown.
		height: Natural height or None when unknown.

	Returns:
		BoundingBoxResult spanning the full extent.
	"""
	if not width or not height:
		width = DEFAULT_IMAGE_SIZE
		height = DEFAULT_IMAGE_SIZE
	return BoundingBoxResult(
		pixel_width=width,
		pixel_height=height,
		bbox_width=width,
		bbox_height=height,
	)


#============================================
def analyze_image(image: PIL.Image.Image, measurer: Measurer) -> BoundingBoxResult:
	"""
	Measure the opaque extent of a decoded image.

	Args:
		image: PIL image, possibly not yet loaded.
		measurer: Measurer providing opaque bounds.

	Returns:
		BoundingBoxResult; full extent when decoding fails or nothing is opaque.
	"""
	width, height = image.size
	try:
		image.load()
		bounds = measurer.measure_opaque_bounds(image)
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as exc:
		print(f"Logo pixels could not be decoded, using full size: {exc}")
		return full_extent_result(width, height)
	if bounds is None:
		return full_extent_result(width, height)
	min_x, min_y, max_x, max_y = bounds
	if max_x < min_x or max_y < min_y:
		return full_extent_result(width, height)
	return BoundingBoxResult(
		pixel_width=width,
		pixel_height=height,
		bbox_width=max_x - min_x + 1,
		bbox_height=max_y - min_y + 1,
	)


#============================================
async def analyze_logo(logo: Logo, measurer: Measurer, loader: LogoLoader | None = None) -> BoundingBoxResult:
	"""
	Load one logo and measure its opaque extent.

	Args:
		logo: Logo record.
		measurer: Measurer providing opaque bounds.
		loader: Async image loader, defaults to decoding the logo bytes.

	Returns:
		BoundingBoxResult, never raises for a bad asset.
	"""
	if loader is None:
		loader = nf.logo_lib.load_logo_image
	# injected loaders may raise anything short of cancellation
	try:
		image = await loader(logo)
	except Exception as exc:
		print(f"Logo {logo.id} could not be opened, using default size: {exc}")
		return full_extent_result(None, None)
	try:
		return analyze_image(image, measurer)
	finally:
		image.close()


#============================================
async def analyze_logos(
	logos: typing.Sequence[Logo],
	measurer: Measurer,
	loader: LogoLoader | None = None,
) -> dict[str, BoundingBoxResult]:
	"""
	Measure a batch of logos one after another.

	Args:
		logos: Logos of one Day Box.
		measurer: Measurer providing opaque bounds.
		loader: Async image loader.

	Returns:
		Results keyed by logo id.
	"""
	results: dict[str, BoundingBoxResult] = {}
	for logo in logos:
		results[logo.id] = await analyze_logo(logo, measurer, loader)
	return results


#============================================
def is_wide_extent(result: BoundingBoxResult, ratio: float = WIDE_ASPECT_RATIO) -> bool:
	"""
	Classify an opaque extent as landscape.

	Args:
		result: Bounding-box result.
		ratio: Width over height threshold.

	Returns:
		True when the extent is wider than the threshold.
	"""
	return result.aspect_ratio > ratio
