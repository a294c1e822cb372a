import asyncio

import PIL.Image
import pytest

import night_flyer.config
import night_flyer.daybox
import night_flyer.logo_lib
import night_flyer.overrides


NO_OVERRIDES = night_flyer.overrides.OverrideTable()


#============================================
def _logo(logo_id: str, width: int, height: int, image_factory, bytes_factory, box=None) -> night_flyer.logo_lib.Logo:
	if box is None:
		box = (0, 0, width, height)
	image = image_factory(width, height, box)
	return night_flyer.logo_lib.Logo(id=logo_id, name=logo_id, data=bytes_factory(image))


#============================================
def _narrow(logo_id: str, image_factory, bytes_factory) -> night_flyer.logo_lib.Logo:
	return _logo(logo_id, 100, 100, image_factory, bytes_factory, (10, 10, 90, 90))


def _wide(logo_id: str, image_factory, bytes_factory) -> night_flyer.logo_lib.Logo:
	return _logo(logo_id, 200, 100, image_factory, bytes_factory, (0, 30, 200, 70))


#============================================
def test_empty_box_shows_placeholder(fake_measurer) -> None:
	"""
	A box without logos lays out no rows and a prompt.
	"""
	box = night_flyer.daybox.DayBox("day-lunes", "LUNES", [], measurer=fake_measurer, overrides=NO_OVERRIDES)
	layout = box.layout()
	assert layout.is_empty
	assert layout.rows == []
	assert layout.placeholder == night_flyer.config.EMPTY_BOX_PROMPT
	assert asyncio.run(box.refresh_metrics()) is False


#============================================
def test_scenario_three_equal_narrow_logos(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	Three equal narrow logos sit in one row at neutral scale.
	"""
	logos = [_narrow(name, logo_image_factory, png_bytes_factory) for name in ("venue_a.png", "venue_b.png", "venue_c.png")]
	box = night_flyer.daybox.DayBox("day-jueves", "JUEVES", logos, measurer=fake_measurer, overrides=NO_OVERRIDES)
	assert asyncio.run(box.refresh_metrics()) is True
	layout = box.layout()
	assert len(layout.rows) == 1
	assert [placed.logo_id for placed in layout.rows[0]] == ["venue_a.png", "venue_b.png", "venue_c.png"]
	for placed in layout.placed:
		assert placed.raw_scale == 1.0
		assert placed.display_scale == 1.5
		assert not placed.is_wide
		assert placed.row_length == 3


#============================================
def test_scenario_seven_logos_three_wide(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	Seven logos with three wide ones pack into [4, 3] and interleave.
	"""
	order = ["n0", "w0", "n1", "w1", "n2", "w2", "n3"]
	logos = []
	for logo_id in order:
		if logo_id.startswith("w"):
			logos.append(_wide(logo_id, logo_image_factory, png_bytes_factory))
		else:
			logos.append(_narrow(logo_id, logo_image_factory, png_bytes_factory))
	box = night_flyer.daybox.DayBox("day-viernes", "VIERNES", logos, measurer=fake_measurer, overrides=NO_OVERRIDES)
	asyncio.run(box.refresh_metrics())
	layout = box.layout()
	rows = [[placed.logo_id for placed in row] for row in layout.rows]
	assert rows == [["w0", "n0", "w2", "n1"], ["n2", "w1", "n3"]]
	for row_index, row in enumerate(layout.rows):
		for column, placed in enumerate(row):
			assert placed.row == row_index
			assert placed.column == column
			assert placed.is_wide == placed.logo_id.startswith("w")
	# wide marks measure 200 against a median of 80
	assert box.states["w0"].raw_scale == pytest.approx(0.6)
	assert box.states["n0"].raw_scale == 1.0


#============================================
def test_scenario_manual_override_applies(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	A logo named Etnia gets its manual multiplier on top of the raw scale.
	"""
	logos = [
		_narrow("Etnia.png", logo_image_factory, png_bytes_factory),
		_narrow("venue_b.png", logo_image_factory, png_bytes_factory),
		_narrow("venue_c.png", logo_image_factory, png_bytes_factory),
	]
	overrides = night_flyer.overrides.default_override_table()
	box = night_flyer.daybox.DayBox("day-sabado", "SÁBADO", logos, measurer=fake_measurer, overrides=overrides)
	# override is visible before metrics arrive
	assert box.states["Etnia.png"].raw_scale == 1.35
	asyncio.run(box.refresh_metrics())
	assert box.states["Etnia.png"].raw_scale == 1.35
	assert box.states["venue_b.png"].raw_scale == 1.0
	assert box.display_scale("Etnia.png") == pytest.approx(2.025)


#============================================
def test_manual_wide_overrides_win(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	Forced wide and forced narrow flags beat the aspect ratio.
	"""
	logos = [
		_narrow("Kapital Club.png", logo_image_factory, png_bytes_factory),
		_wide("Opium.png", logo_image_factory, png_bytes_factory),
	]
	overrides = night_flyer.overrides.default_override_table()
	box = night_flyer.daybox.DayBox("day-sabado", "SÁBADO", logos, measurer=fake_measurer, overrides=overrides)
	asyncio.run(box.refresh_metrics())
	assert box.states["Kapital Club.png"].is_wide is True
	assert box.states["Opium.png"].is_wide is False


#============================================
def test_stale_results_are_discarded(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	Results for a logo set that changed while loading are dropped.
	"""
	first = [_narrow("venue_a.png", logo_image_factory, png_bytes_factory)]
	second = [_wide("venue_b.png", logo_image_factory, png_bytes_factory)]
	box = night_flyer.daybox.DayBox("day-jueves", "JUEVES", first, measurer=fake_measurer, overrides=NO_OVERRIDES)

	async def scenario() -> bool:
		gate = asyncio.Event()

		async def slow_loader(logo):
			await gate.wait()
			return night_flyer.logo_lib.open_logo_image(logo)

		task = asyncio.create_task(box.refresh_metrics(slow_loader))
		await asyncio.sleep(0)
		box.set_logos(second)
		gate.set()
		return await task

	assert asyncio.run(scenario()) is False
	assert list(box.states) == ["venue_b.png"]
	assert box.states["venue_b.png"].measured is False
	assert box.states["venue_b.png"].is_wide is False


#============================================
def test_resize_clamps_and_resets(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	User sizes step by 0.1 inside [0.4, 1.6] and reset to 1.0.
	"""
	logos = [_narrow("venue_a.png", logo_image_factory, png_bytes_factory)]
	box = night_flyer.daybox.DayBox("day-jueves", "JUEVES", logos, measurer=fake_measurer, overrides=NO_OVERRIDES)
	assert box.grow_logo("venue_a.png") == 1.1
	for _ in range(10):
		box.grow_logo("venue_a.png")
	assert box.states["venue_a.png"].size == 1.6
	for _ in range(20):
		box.shrink_logo("venue_a.png")
	assert box.states["venue_a.png"].size == 0.4
	box.reset_logo_size("venue_a.png")
	assert box.states["venue_a.png"].size == 1.0
	with pytest.raises(KeyError):
		box.resize_logo("missing.png", 0.1)


#============================================
def test_extended_size_range(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	The extended variant allows sizes up to 2.5.
	"""
	logos = [_narrow("venue_a.png", logo_image_factory, png_bytes_factory)]
	config = night_flyer.config.default_daybox_config(extended_size_range=True)
	box = night_flyer.daybox.DayBox(
		"day-jueves", "JUEVES", logos, measurer=fake_measurer, overrides=NO_OVERRIDES, config=config,
	)
	for _ in range(30):
		box.grow_logo("venue_a.png")
	assert box.states["venue_a.png"].size == 2.5
	assert box.display_scale("venue_a.png") == 2.2


#============================================
def test_logo_set_change_resets_state(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	Sizes survive an identical logo set and reset when it changes.
	"""
	logo_a = _narrow("venue_a.png", logo_image_factory, png_bytes_factory)
	logo_b = _narrow("venue_b.png", logo_image_factory, png_bytes_factory)
	box = night_flyer.daybox.DayBox("day-jueves", "JUEVES", [logo_a], measurer=fake_measurer, overrides=NO_OVERRIDES)
	box.grow_logo("venue_a.png")
	assert box.set_logos([logo_a]) is False
	assert box.states["venue_a.png"].size == 1.1
	assert box.set_logos([logo_a, logo_b]) is True
	assert box.states["venue_a.png"].size == 1.0


#============================================
def test_layout_marks_selection_and_forced_label(fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	Layout carries the selection flag and the forced label scale.
	"""
	logos = [
		_narrow("venue_a.png", logo_image_factory, png_bytes_factory),
		_narrow("venue_b.png", logo_image_factory, png_bytes_factory),
	]
	box = night_flyer.daybox.DayBox("day-jueves", "JUEVES", logos, measurer=fake_measurer, overrides=NO_OVERRIDES)
	box.label_fitter.mount(60.0)
	layout = box.layout(selected_logo_id="venue_b.png", forced_label_scale=0.6)
	assert [placed.selected for placed in layout.placed] == [False, True]
	assert layout.label_scale == 0.6
	assert box.layout().label_scale == pytest.approx(0.85)


#============================================
def test_oversized_logo_does_not_abort_refresh(monkeypatch, fake_measurer, logo_image_factory, png_bytes_factory) -> None:
	"""
	A logo over the Pillow pixel limit still gets a measured state.
	"""
	logos = [
		_logo("small.png", 50, 50, logo_image_factory, png_bytes_factory),
		_logo("large.png", 400, 400, logo_image_factory, png_bytes_factory),
	]
	box = night_flyer.daybox.DayBox("day-jueves", "JUEVES", logos, measurer=fake_measurer, overrides=NO_OVERRIDES)
	monkeypatch.setattr(PIL.Image, "MAX_IMAGE_PIXELS", 10000)
	assert asyncio.run(box.refresh_metrics()) is True
	assert box.states["small.png"].measured
	assert box.states["large.png"].measured
	# median of 50 and 128 is 50, so the default-sized logo is clamped low
	assert box.states["large.png"].raw_scale == 0.6
	assert box.states["small.png"].raw_scale == 1.0
