import asyncio

import pytest

import night_flyer.label_fit


#============================================
def test_label_scale_fills_target_height(fake_measurer) -> None:
	"""
	The label scale maps the measured height onto 85% of the container.
	"""
	# "VIERNES" measures 70 px tall with the fake measurer
	scale = night_flyer.label_fit.compute_label_scale("VIERNES", 80.0, fake_measurer)
	assert scale == pytest.approx(68.0 / 70.0)


#============================================
def test_label_scale_is_clamped(fake_measurer) -> None:
	"""
	Scales stay in [0.5, 1.2].
	"""
	assert night_flyer.label_fit.compute_label_scale("MIÉRCOLES", 10.0, fake_measurer) == 0.5
	assert night_flyer.label_fit.compute_label_scale("LUNES", 1000.0, fake_measurer) == 1.2


#============================================
def test_label_scale_zero_measurement(fake_measurer_factory) -> None:
	"""
	A text run that measures zero height falls back to 1.0.
	"""
	measurer = fake_measurer_factory(heights={"": 0.0})
	assert night_flyer.label_fit.compute_label_scale("", 100.0, measurer) == 1.0


#============================================
def test_label_scale_skips_missing_height(fake_measurer) -> None:
	"""
	Missing or non-positive container heights skip the cycle.
	"""
	assert night_flyer.label_fit.compute_label_scale("JUEVES", None, fake_measurer) is None
	assert night_flyer.label_fit.compute_label_scale("JUEVES", 0.0, fake_measurer) is None
	assert night_flyer.label_fit.compute_label_scale("JUEVES", float("nan"), fake_measurer) is None


#============================================
def test_label_scale_monotonic_in_height(fake_measurer) -> None:
	"""
	A taller container never shrinks the label.
	"""
	previous = 0.0
	for height in range(20, 400, 20):
		scale = night_flyer.label_fit.compute_label_scale("SÁBADO", float(height), fake_measurer)
		assert scale >= previous
		previous = scale


#============================================
def test_fitter_reports_every_measurement(fake_measurer) -> None:
	"""
	The fitter reports its own scale through the callback.
	"""
	reports = []
	fitter = night_flyer.label_fit.LabelFitter(
		"day-jueves",
		"JUEVES",
		fake_measurer,
		on_measured=lambda day_id, scale: reports.append((day_id, scale)),
	)
	assert fitter.mount(None) is None
	assert reports == []
	scale = fitter.mount(60.0)
	assert reports == [("day-jueves", scale)]
	assert fitter.dynamic_scale == scale
	assert fitter.effective_scale(0.7) == 0.7
	assert fitter.effective_scale() == scale


#============================================
def test_fitter_remeasures_on_text_change(fake_measurer) -> None:
	"""
	Renaming the label re-measures against the last container height.
	"""
	fitter = night_flyer.label_fit.LabelFitter("day-lunes", "LUNES", fake_measurer)
	fitter.mount(60.0)
	longer = fitter.set_text("MIÉRCOLES")
	assert longer == pytest.approx(0.85 * 60.0 / 90.0)


#============================================
def test_resize_is_debounced(fake_measurer) -> None:
	"""
	A burst of resizes inside the debounce window measures once, at the last height.
	"""
	reports = []

	async def scenario() -> None:
		fitter = night_flyer.label_fit.LabelFitter(
			"day-viernes",
			"VIERNES",
			fake_measurer,
			on_measured=lambda day_id, scale: reports.append(scale),
			debounce_seconds=0.01,
		)
		for height in (40.0, 60.0, 80.0):
			fitter.notify_resize(height)
		await asyncio.sleep(0.05)

	asyncio.run(scenario())
	assert reports == [pytest.approx(0.85 * 80.0 / 70.0)]


#============================================
def test_resize_without_loop_measures_immediately(fake_measurer) -> None:
	"""
	Outside an event loop a resize measures right away.
	"""
	fitter = night_flyer.label_fit.LabelFitter("day-domingo", "DOMINGO", fake_measurer)
	fitter.notify_resize(70.0)
	assert fitter.dynamic_scale == pytest.approx(0.85)


#============================================
def test_cancel_drops_pending_resize(fake_measurer) -> None:
	"""
	A cancelled fitter does not measure when its debounce window ends.
	"""
	reports = []

	async def scenario() -> None:
		fitter = night_flyer.label_fit.LabelFitter(
			"day-sabado",
			"SÁBADO",
			fake_measurer,
			on_measured=lambda day_id, scale: reports.append(scale),
			debounce_seconds=0.01,
		)
		fitter.notify_resize(60.0)
		fitter.cancel()
		fitter.cancel()
		await asyncio.sleep(0.05)

	asyncio.run(scenario())
	assert reports == []
