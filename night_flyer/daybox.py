"""
Day Box layout container: scaled, packed, and interleaved logos plus a fitted label.
"""

# Standard Library
import dataclasses
import typing

# local repo modules
import night_flyer as nf
import night_flyer.bbox
import night_flyer.config
import night_flyer.label_fit
import night_flyer.logo_lib
import night_flyer.measure
import night_flyer.overrides
import night_flyer.rows
import night_flyer.scale


Logo = nf.logo_lib.Logo
BoundingBoxResult = nf.bbox.BoundingBoxResult
DayBoxConfig = nf.config.DayBoxConfig
LabelFitter = nf.label_fit.LabelFitter
LabelCallback = nf.label_fit.LabelCallback
Measurer = nf.measure.Measurer
OverrideTable = nf.overrides.OverrideTable

EMPTY_BOX_PROMPT = nf.config.EMPTY_BOX_PROMPT
LOGO_SIZE_DEFAULT = nf.config.LOGO_SIZE_DEFAULT


@dataclasses.dataclass
class NormalizedLogoState:
	raw_scale: float = 1.0
	is_wide: bool = False
	size: float = LOGO_SIZE_DEFAULT
	measured: bool = False


@dataclasses.dataclass
class PlacedLogo:
	logo_id: str
	name: str
	row: int
	column: int
	row_length: int
	display_scale: float
	raw_scale: float
	is_wide: bool
	size: float
	selected: bool


@dataclasses.dataclass
class DayBoxLayout:
	day_id: str
	day_name: str
	rows: list[list[PlacedLogo]]
	label_scale: float
	placeholder: str | None = None

	@property
	def is_empty(self) -> bool:
		return not self.rows

	@property
	def placed(self) -> list[PlacedLogo]:
		return [logo for row in self.rows for logo in row]


class DayBox:
	"""
	One calendar day: its logos, their per-logo state, and the day label.
	"""

	def __init__(
		self,
		day_id: str,
		day_name: str,
		logos: typing.Sequence[Logo] = (),
		measurer: Measurer | None = None,
		overrides: OverrideTable | None = None,
		config: DayBoxConfig | None = None,
		on_label_measured: LabelCallback | None = None,
	) -> None:
		self.day_id = day_id
		self.day_name = day_name
		self.config = config or nf.config.default_daybox_config()
		self.measurer = measurer or nf.measure.DefaultMeasurer(self.config.alpha_threshold)
		self.overrides = overrides if overrides is not None else nf.overrides.default_override_table()
		self.label_fitter = LabelFitter(
			day_id,
			day_name,
			self.measurer,
			on_measured=on_label_measured,
			debounce_seconds=self.config.label_debounce_seconds,
			low=self.config.label_scale_min,
			high=self.config.label_scale_max,
			fill_ratio=self.config.label_fill_ratio,
		)
		self.generation = 0
		self.logos: tuple[Logo, ...] = ()
		self.states: dict[str, NormalizedLogoState] = {}
		self.set_logos(logos)

	@property
	def logo_ids(self) -> tuple[str, ...]:
		return tuple(logo.id for logo in self.logos)

	#============================================
	def set_logos(self, logos: typing.Sequence[Logo]) -> bool:
		"""
		Replace the logo set, resetting per-logo state when it changed.

		Args:
			logos: New logos in display order.

		Returns:
			True when the logo identity set changed.
		"""
		new_logos = tuple(logos)
		if tuple(logo.id for logo in new_logos) == self.logo_ids and self.generation > 0:
			return False
		self.logos = new_logos
		self.generation += 1
		self.states = {logo.id: self._initial_state(logo) for logo in new_logos}
		return True

	def _initial_state(self, logo: Logo) -> NormalizedLogoState:
		raw_scale = nf.scale.apply_manual_override(1.0, logo.name, self.overrides)
		forced_wide = self.overrides.wide_for(logo.name)
		return NormalizedLogoState(raw_scale=raw_scale, is_wide=bool(forced_wide))

	def rename(self, day_name: str) -> None:
		self.day_name = day_name
		self.label_fitter.set_text(day_name)

	#============================================
	def classify_wide(self, logo: Logo, result: BoundingBoxResult) -> bool:
		"""
		Decide whether a logo is wide.

		Args:
			logo: Logo record.
			result: Its bounding-box result.

		Returns:
			Manual override when present, else the aspect ratio test.
		"""
		forced = self.overrides.wide_for(logo.name)
		if forced is not None:
			return forced
		return nf.bbox.is_wide_extent(result, self.config.wide_aspect_ratio)

	#============================================
	def apply_metrics(self, results: typing.Mapping[str, BoundingBoxResult]) -> None:
		"""
		Fold bounding-box results into per-logo scale and wide state.

		User sizes survive; logos without a result keep their defaults.

		Args:
			results: Bounding-box results keyed by logo id.
		"""
		known = {logo_id: result for logo_id, result in results.items() if logo_id in self.states}
		raw_scales = nf.scale.compute_raw_scales(
			known,
			low=self.config.raw_scale_min,
			high=self.config.raw_scale_max,
		)
		new_states = dict(self.states)
		for logo in self.logos:
			if logo.id not in known:
				continue
			previous = self.states[logo.id]
			new_states[logo.id] = dataclasses.replace(
				previous,
				raw_scale=nf.scale.apply_manual_override(raw_scales[logo.id], logo.name, self.overrides),
				is_wide=self.classify_wide(logo, known[logo.id]),
				measured=True,
			)
		self.states = new_states

	#============================================
	async def refresh_metrics(self, loader: nf.bbox.LogoLoader | None = None) -> bool:
		"""
		Measure the current logos and apply the results unless they went stale.

		Args:
			loader: Async image loader.

		Returns:
			True when the results were applied.
		"""
		if not self.logos:
			return False
		generation = self.generation
		logos = self.logos
		results = await nf.bbox.analyze_logos(logos, self.measurer, loader)
		if generation != self.generation:
			return False
		self.apply_metrics(results)
		return True

	#============================================
	def resize_logo(self, logo_id: str, delta: float) -> float:
		"""
		Step the user size of one logo.

		Args:
			logo_id: Logo id.
			delta: Size step, usually +/- the configured step.

		Returns:
			New size multiplier.
		"""
		state = self.states.get(logo_id)
		if state is None:
			raise KeyError(f"Logo {logo_id} is not in day box {self.day_id}")
		size = nf.scale.adjust_size(state.size, delta, self.config.size_min, self.config.size_max)
		self.states = {**self.states, logo_id: dataclasses.replace(state, size=size)}
		return size

	def grow_logo(self, logo_id: str) -> float:
		return self.resize_logo(logo_id, self.config.size_step)

	def shrink_logo(self, logo_id: str) -> float:
		return self.resize_logo(logo_id, -self.config.size_step)

	def reset_logo_size(self, logo_id: str) -> None:
		state = self.states.get(logo_id)
		if state is None:
			return
		self.states = {**self.states, logo_id: dataclasses.replace(state, size=LOGO_SIZE_DEFAULT)}

	def display_scale(self, logo_id: str) -> float:
		state = self.states[logo_id]
		return nf.scale.compute_display_scale(
			state.raw_scale,
			state.size,
			global_scale=self.config.global_logo_scale,
			low=self.config.display_scale_min,
			high=self.config.display_scale_max,
		)

	#============================================
	def layout(
		self,
		selected_logo_id: str | None = None,
		forced_label_scale: float | None = None,
	) -> DayBoxLayout:
		"""
		Build the placed logo rows and the label scale.

		Args:
			selected_logo_id: Logo selected in this box, if any.
			forced_label_scale: Shared label scale from the composition.

		Returns:
			DayBoxLayout.
		"""
		label_scale = self.label_fitter.effective_scale(forced_label_scale)
		if not self.logos:
			return DayBoxLayout(
				day_id=self.day_id,
				day_name=self.day_name,
				rows=[],
				label_scale=label_scale,
				placeholder=EMPTY_BOX_PROMPT,
			)

		def is_wide(logo: Logo) -> bool:
			return self.states[logo.id].is_wide

		rows = nf.rows.build_rows(self.logos, is_wide)
		placed_rows: list[list[PlacedLogo]] = []
		for row_index, row in enumerate(rows):
			placed_row: list[PlacedLogo] = []
			for column, logo in enumerate(row):
				state = self.states[logo.id]
				placed_row.append(
					PlacedLogo(
						logo_id=logo.id,
						name=logo.name,
						row=row_index,
						column=column,
						row_length=len(row),
						display_scale=self.display_scale(logo.id),
						raw_scale=state.raw_scale,
						is_wide=state.is_wide,
						size=state.size,
						selected=logo.id == selected_logo_id,
					)
				)
			placed_rows.append(placed_row)
		return DayBoxLayout(
			day_id=self.day_id,
			day_name=self.day_name,
			rows=placed_rows,
			label_scale=label_scale,
		)
