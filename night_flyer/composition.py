"""
Flyer composition: owns the Day Boxes, shared label scale, and logo selection.
"""

# Standard Library
import dataclasses
import math
import typing

# local repo modules
import night_flyer as nf
import night_flyer.bbox
import night_flyer.config
import night_flyer.daybox
import night_flyer.logo_lib
import night_flyer.measure
import night_flyer.overrides
import night_flyer.project


DayBox = nf.daybox.DayBox
DayBoxLayout = nf.daybox.DayBoxLayout
DayBoxConfig = nf.config.DayBoxConfig
Logo = nf.logo_lib.Logo
Measurer = nf.measure.Measurer
OverrideTable = nf.overrides.OverrideTable
FlyerProject = nf.project.FlyerProject
DayBoxData = nf.project.DayBoxData


class FlyerComposition:
	"""
	Coordinates every Day Box on the flyer.

	Each box reports its own label scale; the composition forces the smallest
	reported value on all boxes so labels render at one size. At most one logo
	is selected across the whole flyer.
	"""

	def __init__(
		self,
		logos: typing.Sequence[Logo],
		project: FlyerProject | None = None,
		measurer: Measurer | None = None,
		overrides: OverrideTable | None = None,
		config: DayBoxConfig | None = None,
	) -> None:
		self.logo_index = nf.logo_lib.index_logos(list(logos))
		self.project = project or FlyerProject()
		self.config = config or nf.config.default_daybox_config()
		self.measurer = measurer or nf.measure.DefaultMeasurer(self.config.alpha_threshold)
		self.overrides = overrides if overrides is not None else nf.overrides.default_override_table()
		self.label_measurements: dict[str, float] = {}
		self.selection: tuple[str, str] | None = None
		self.boxes: dict[str, DayBox] = {}
		for data in self.project.day_boxes:
			if data.id in self.boxes:
				raise ValueError(f"Duplicate day box id: {data.id}")
			self.boxes[data.id] = self._build_box(data)

	def _build_box(self, data: DayBoxData) -> DayBox:
		return DayBox(
			data.id,
			data.day_name,
			self._resolve_logos(data.logo_ids),
			measurer=self.measurer,
			overrides=self.overrides,
			config=self.config,
			on_label_measured=self.handle_label_measured,
		)

	def _resolve_logos(self, logo_ids: typing.Sequence[str]) -> list[Logo]:
		resolved = []
		for logo_id in logo_ids:
			logo = self.logo_index.get(logo_id)
			if logo is None:
				print(f"Unknown logo id {logo_id}, skipping")
				continue
			resolved.append(logo)
		return resolved

	def _box(self, day_id: str) -> DayBox:
		box = self.boxes.get(day_id)
		if box is None:
			raise KeyError(f"Unknown day box: {day_id}")
		return box

	#============================================
	def handle_label_measured(self, day_id: str, scale: float) -> None:
		"""
		Record the self-computed label scale of one box.

		Args:
			day_id: Reporting box id.
			scale: Its label scale.
		"""
		if not day_id or scale is None or not math.isfinite(scale):
			return
		if day_id not in self.boxes:
			return
		self.label_measurements = {**self.label_measurements, day_id: scale}

	@property
	def forced_label_scale(self) -> float | None:
		if not self.label_measurements:
			return None
		return min(self.label_measurements.values())

	#============================================
	def measure_labels(self, container_height: float) -> float | None:
		"""
		Mount every label at one container height.

		Args:
			container_height: Label container height shared by all boxes.

		Returns:
			The forced label scale after all boxes reported.
		"""
		for box in self.boxes.values():
			box.label_fitter.mount(container_height)
		return self.forced_label_scale

	#============================================
	def select_logo(self, day_id: str, logo_id: str) -> None:
		"""
		Select one logo, replacing any previous selection.

		Args:
			day_id: Box holding the logo.
			logo_id: Logo id.
		"""
		box = self._box(day_id)
		if logo_id not in box.states:
			raise KeyError(f"Logo {logo_id} is not in day box {day_id}")
		self.selection = (day_id, logo_id)

	def selected_logo_id(self, day_id: str) -> str | None:
		if self.selection is None or self.selection[0] != day_id:
			return None
		return self.selection[1]

	#============================================
	def clear_selection(self, reset_sizes: bool = False) -> None:
		"""
		Drop the selection, e.g. right before export.

		Args:
			reset_sizes: Also return every user size to the default.
		"""
		self.selection = None
		if not reset_sizes:
			return
		for box in self.boxes.values():
			for logo_id in box.logo_ids:
				box.reset_logo_size(logo_id)

	#============================================
	def resize_selected(self, delta: float) -> float | None:
		"""
		Step the user size of the selected logo.

		Args:
			delta: Size step.

		Returns:
			New size, or None when nothing is selected.
		"""
		if self.selection is None:
			return None
		day_id, logo_id = self.selection
		return self._box(day_id).resize_logo(logo_id, delta)

	#============================================
	def assign_logos(self, day_id: str, logo_ids: typing.Sequence[str]) -> bool:
		"""
		Replace the logos of one box.

		Args:
			day_id: Box id.
			logo_ids: Logo ids in display order; unknown ids are skipped.

		Returns:
			True when the box logo set changed.
		"""
		box = self._box(day_id)
		logos = self._resolve_logos(logo_ids)
		changed = box.set_logos(logos)
		self.project.day_boxes = [
			dataclasses.replace(data, logo_ids=[logo.id for logo in logos]) if data.id == day_id else data
			for data in self.project.day_boxes
		]
		if changed and self.selection is not None and self.selection[0] == day_id:
			self.selection = None
		return changed

	#============================================
	def set_days(self, day_names: typing.Sequence[str]) -> None:
		"""
		Change the days on the flyer.

		Logo assignments are kept by position, so renaming the second day keeps
		the logos of the second box.

		Args:
			day_names: New day names in order.
		"""
		new_data = []
		for index, day_name in enumerate(day_names):
			logo_ids: list[str] = []
			if index < len(self.project.day_boxes):
				logo_ids = list(self.project.day_boxes[index].logo_ids)
			new_data.append(DayBoxData(id=nf.project.day_box_id(day_name), day_name=day_name, logo_ids=logo_ids))
		ids = [data.id for data in new_data]
		if len(set(ids)) != len(ids):
			raise ValueError(f"Duplicate day names: {list(day_names)}")

		new_boxes: dict[str, DayBox] = {}
		for data in new_data:
			box = self.boxes.get(data.id)
			if box is None:
				box = self._build_box(data)
			else:
				box.set_logos(self._resolve_logos(data.logo_ids))
				if box.day_name != data.day_name:
					box.rename(data.day_name)
			new_boxes[data.id] = box
		for day_id, box in self.boxes.items():
			if day_id not in new_boxes:
				box.label_fitter.cancel()
		self.boxes = new_boxes
		self.project.day_boxes = new_data
		self.label_measurements = {
			day_id: scale for day_id, scale in self.label_measurements.items() if day_id in new_boxes
		}
		if self.selection is not None:
			day_id, logo_id = self.selection
			if day_id not in new_boxes or logo_id not in new_boxes[day_id].states:
				self.selection = None

	#============================================
	async def refresh_all(self, loader: nf.bbox.LogoLoader | None = None) -> int:
		"""
		Refresh bounding-box metrics for every box, one after another.

		Args:
			loader: Async image loader.

		Returns:
			Number of boxes whose results were applied.
		"""
		applied = 0
		for box in list(self.boxes.values()):
			if await box.refresh_metrics(loader):
				applied += 1
		return applied

	#============================================
	def layout(self) -> list[DayBoxLayout]:
		"""
		Lay out every box with the shared label scale and the selection.

		Returns:
			DayBoxLayout list in day order.
		"""
		forced = self.forced_label_scale
		return [
			box.layout(selected_logo_id=self.selected_logo_id(day_id), forced_label_scale=forced)
			for day_id, box in self.boxes.items()
		]
