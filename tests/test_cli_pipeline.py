import json
import pathlib

import PIL.Image

import night_flyer.cli
import night_flyer.project


#============================================
def test_pipeline_from_manifest(tmp_path: pathlib.Path, logo_image_factory) -> None:
	"""
	Run the CLI pipeline on a small manifest with an AI answer and export everything.
	"""
	names = ["Etnia.png", "Kapital Club.png", "Opium.png", "Shoko.png", "La Vaca.png"]
	for index, name in enumerate(names):
		width = 240 if index % 2 else 120
		logo_image_factory(width, 120, (0, 10, width, 110)).save(tmp_path / name)
	manifest = tmp_path / "logos.json"
	manifest.write_text(json.dumps(names + ["Missing.png"]), encoding="utf-8")
	response = tmp_path / "response.json"
	response.write_text(
		json.dumps({"jueves": ["Etnia.png", "Opium.png"], "viernes": names, "sabado": ["Ghost.png"]}),
		encoding="utf-8",
	)

	args = night_flyer.cli.parse_args([
		str(manifest),
		"--preset", "Jue-Sáb",
		"--assign-response", str(response),
		"--prompt", "Fin de semana techno",
		"--write-request", str(tmp_path / "request.json"),
		"--output", str(tmp_path / "flyer.png"),
		"--pdf", str(tmp_path / "flyer.pdf"),
		"--pixel-ratio", "1",
		"--save-project", str(tmp_path / "project.json"),
	])
	night_flyer.cli.run_pipeline(args)

	with PIL.Image.open(tmp_path / "flyer.png") as image:
		assert image.size == (450, 800)
	assert (tmp_path / "flyer.pdf").stat().st_size > 0
	request = json.loads((tmp_path / "request.json").read_text(encoding="utf-8"))
	assert request["config"]["responseSchema"]["required"] == ["jueves", "viernes", "sabado"]

	project = night_flyer.project.load_project(tmp_path / "project.json")
	assert [box.day_name for box in project.day_boxes] == ["JUEVES", "VIERNES", "SÁBADO"]
	assert project.day_boxes[0].logo_ids == ["Etnia.png", "Opium.png"]
	assert project.day_boxes[1].logo_ids == names
	assert project.day_boxes[2].logo_ids == []


#============================================
def test_day_names_from_args() -> None:
	"""
	Explicit days win over the preset and are upper-cased.
	"""
	args = night_flyer.cli.parse_args(["logos.json", "--days", "viernes", "sábado"])
	assert night_flyer.cli.resolve_day_names(args) == ["VIERNES", "SÁBADO"]
	args = night_flyer.cli.parse_args(["logos.json", "--preset", "Vie-Dom"])
	assert night_flyer.cli.resolve_day_names(args) == ["VIERNES", "SÁBADO", "DOMINGO"]
