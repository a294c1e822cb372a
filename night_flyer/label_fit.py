"""
Day label auto-fitting against the container height.
"""

# Standard Library
import asyncio
import math
import typing

# local repo modules
import night_flyer as nf
import night_flyer.config
import night_flyer.measure


Measurer = nf.measure.Measurer
TextStyle = nf.measure.TextStyle
clamp = nf.config.clamp

LABEL_FILL_RATIO = nf.config.LABEL_FILL_RATIO
LABEL_SCALE_MIN = nf.config.LABEL_SCALE_MIN
LABEL_SCALE_MAX = nf.config.LABEL_SCALE_MAX
LABEL_DEBOUNCE_SECONDS = nf.config.LABEL_DEBOUNCE_SECONDS

LabelCallback = typing.Callable[[str, float], None]


#============================================
def compute_label_scale(
	text: str,
	container_height: float | None,
	measurer: Measurer,
	style: TextStyle | None = None,
	fill_ratio: float = LABEL_FILL_RATIO,
	low: float = LABEL_SCALE_MIN,
	high: float = LABEL_SCALE_MAX,
) -> float | None:
	"""
	Compute the scale that makes a vertical label fill its container.

	Args:
		text: Day label text.
		container_height: Available height, None when not laid out yet.
		measurer: Measurer for the reference text run.
		style: Reference style, defaults to the label style.
		fill_ratio: Fraction of the container height to fill.
		low: Lower clamp.
		high: Upper clamp.

	Returns:
		Clamped scale, or None when the container has no usable height.
	"""
	if container_height is None or not math.isfinite(container_height) or container_height <= 0:
		return None
	if style is None:
		style = TextStyle()
	_width, measured_height = measurer.measure_text(text, style)
	target_height = container_height * fill_ratio
	if measured_height <= 0:
		optimal = 1.0
	else:
		optimal = target_height / measured_height
	return clamp(optimal, low, high)


class LabelFitter:
	"""
	Keeps one Day Box label scaled to its container.

	The fitter always reports its own scale through the callback, even when a
	forced scale from the composition is what gets rendered.
	"""

	def __init__(
		self,
		day_id: str,
		text: str,
		measurer: Measurer,
		on_measured: LabelCallback | None = None,
		style: TextStyle | None = None,
		debounce_seconds: float = LABEL_DEBOUNCE_SECONDS,
		low: float = LABEL_SCALE_MIN,
		high: float = LABEL_SCALE_MAX,
		fill_ratio: float = LABEL_FILL_RATIO,
	) -> None:
		self.day_id = day_id
		self.text = text
		self.measurer = measurer
		self.on_measured = on_measured
		self.style = style or TextStyle()
		self.debounce_seconds = debounce_seconds
		self.low = low
		self.high = high
		self.fill_ratio = fill_ratio
		self.dynamic_scale = 1.0
		self.container_height: float | None = None
		self._pending: asyncio.TimerHandle | None = None

	#============================================
	def measure(self, container_height: float | None = None) -> float | None:
		"""
		Recompute the label scale now.

		Args:
			container_height: New container height, keeps the last one when None.

		Returns:
			The new scale, or None when the cycle was skipped.
		"""
		if container_height is not None:
			self.container_height = container_height
		scale = compute_label_scale(
			self.text,
			self.container_height,
			self.measurer,
			style=self.style,
			fill_ratio=self.fill_ratio,
			low=self.low,
			high=self.high,
		)
		if scale is None:
			return None
		self.dynamic_scale = scale
		if self.on_measured is not None:
			self.on_measured(self.day_id, scale)
		return scale

	def mount(self, container_height: float | None) -> float | None:
		return self.measure(container_height)

	#============================================
	def notify_resize(self, container_height: float | None) -> None:
		"""
		Schedule a debounced re-measure after a container resize.

		Outside a running event loop the measurement happens immediately.

		Args:
			container_height: New container height.
		"""
		self.container_height = container_height
		try:
			loop = asyncio.get_running_loop()
		except RuntimeError:
			self.measure()
			return
		if self._pending is not None:
			self._pending.cancel()
		self._pending = loop.call_later(self.debounce_seconds, self._run_pending)

	def cancel(self) -> None:
		if self._pending is not None:
			self._pending.cancel()
			self._pending = None

	def _run_pending(self) -> None:
		self._pending = None
		self.measure()

	def set_text(self, text: str) -> float | None:
		self.text = text
		return self.measure()

	#============================================
	def effective_scale(self, forced_scale: float | None = None) -> float:
		"""
		Scale used for drawing the label.

		Args:
			forced_scale: Shared scale from the composition.

		Returns:
			The forced scale when given, else the local scale.
		"""
		if forced_scale is not None:
			return forced_scale
		return self.dynamic_scale
