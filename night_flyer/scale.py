"""
Group-relative logo scale normalization.
"""

# Standard Library
import typing

# local repo modules
import night_flyer as nf
import night_flyer.bbox
import night_flyer.config
import night_flyer.overrides


BoundingBoxResult = nf.bbox.BoundingBoxResult
OverrideTable = nf.overrides.OverrideTable
clamp = nf.config.clamp

RAW_SCALE_MIN = nf.config.RAW_SCALE_MIN
RAW_SCALE_MAX = nf.config.RAW_SCALE_MAX
DISPLAY_SCALE_MIN = nf.config.DISPLAY_SCALE_MIN
DISPLAY_SCALE_MAX = nf.config.DISPLAY_SCALE_MAX
GLOBAL_LOGO_SCALE = nf.config.GLOBAL_LOGO_SCALE
OVERRIDE_ROUND_DIGITS = nf.config.OVERRIDE_ROUND_DIGITS
LOGO_SIZE_MIN = nf.config.LOGO_SIZE_MIN
LOGO_SIZE_MAX = nf.config.LOGO_SIZE_MAX


#============================================
def median_low(values: typing.Sequence[float]) -> float:
	"""
	Return the lower median of a non-empty sequence.

	Args:
		values: Numbers.

	Returns:
		Element at index floor((n - 1) / 2) after sorting.
	"""
	if not values:
		raise ValueError("median_low requires at least one value")
	ordered = sorted(values)
	return ordered[(len(ordered) - 1) // 2]


#============================================
def compute_raw_scales(
	results: typing.Mapping[str, BoundingBoxResult],
	low: float = RAW_SCALE_MIN,
	high: float = RAW_SCALE_MAX,
) -> dict[str, float]:
	"""
	Scale each logo so its opaque extent approaches the group median.

	Args:
		results: Bounding-box results keyed by logo id.
		low: Lower clamp.
		high: Upper clamp.

	Returns:
		Raw scales keyed by logo id.
	"""
	if not results:
		return {}
	median = median_low([result.bbox_max for result in results.values()])
	scales: dict[str, float] = {}
	for logo_id, result in results.items():
		own = result.bbox_max
		if own <= 0:
			scales[logo_id] = 1.0
			continue
		scales[logo_id] = clamp(median / own, low, high)
	return scales


#============================================
def apply_manual_override(raw_scale: float, name: str, table: OverrideTable) -> float:
	"""
	Fold a manual multiplier into a raw scale.

	Args:
		raw_scale: Group-relative scale.
		name: Logo display name.
		table: Override table.

	Returns:
		Scale with the override applied, rounded to three decimals.
	"""
	multiplier = table.scale_for(name)
	if multiplier is None:
		return raw_scale
	return round(raw_scale * multiplier, OVERRIDE_ROUND_DIGITS)


#============================================
def compute_display_scale(
	raw_scale: float,
	size: float = 1.0,
	global_scale: float = GLOBAL_LOGO_SCALE,
	low: float = DISPLAY_SCALE_MIN,
	high: float = DISPLAY_SCALE_MAX,
) -> float:
	"""
	Combine raw scale, user size, and the global constant.

	Args:
		raw_scale: Scale after override.
		size: User size multiplier.
		global_scale: Global logo scale.
		low: Lower clamp.
		high: Upper clamp.

	Returns:
		Final applied scale.
	"""
	return clamp(global_scale * size * raw_scale, low, high)


#============================================
def adjust_size(size: float, delta: float, low: float = LOGO_SIZE_MIN, high: float = LOGO_SIZE_MAX) -> float:
	"""
	Step a user size multiplier and keep it in range.

	Args:
		size: Current multiplier.
		delta: Step, usually +/-0.1.
		low: Lower clamp.
		high: Upper clamp.

	Returns:
		New multiplier rounded to two decimals.
	"""
	return round(clamp(size + delta, low, high), 2)
