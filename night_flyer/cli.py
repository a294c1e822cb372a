"""
CLI entry points for building a nightlife flyer from a logo manifest.
"""

# Standard Library
import argparse
import asyncio
import json
import mimetypes
import pathlib
import time

# local repo modules
import night_flyer as nf
import night_flyer.composition
import night_flyer.config
import night_flyer.genai_lib
import night_flyer.logo_lib
import night_flyer.overrides
import night_flyer.project
import night_flyer.render


DayBoxConfig = nf.config.DayBoxConfig
ExportConfig = nf.config.ExportConfig
FlyerComposition = nf.composition.FlyerComposition

AVAILABLE_DAYS = nf.config.AVAILABLE_DAYS
DAY_PRESETS = nf.config.DAY_PRESETS
EXPORT_PIXEL_RATIO = nf.config.EXPORT_PIXEL_RATIO
THEME_QUERIES = nf.config.THEME_QUERIES
DEFAULT_PRESET = "Jue-Sáb"


#============================================
def build_daybox_config(args: argparse.Namespace) -> DayBoxConfig:
	"""
	Build Day Box config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		DayBoxConfig.
	"""
	return nf.config.default_daybox_config(extended_size_range=args.extended_sizes)


#============================================
def build_export_config(args: argparse.Namespace) -> ExportConfig:
	"""
	Build export config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		ExportConfig.
	"""
	return nf.config.default_export_config(pixel_ratio=args.pixel_ratio)


#============================================
def resolve_day_names(args: argparse.Namespace) -> list[str]:
	"""
	Pick the day names from --days or --preset.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Upper-case day names.
	"""
	if args.days:
		day_names = [day.strip().upper() for day in args.days]
	else:
		if args.preset not in DAY_PRESETS:
			raise ValueError(f"Unknown day preset {args.preset!r}, choose from {sorted(DAY_PRESETS)}")
		day_names = list(DAY_PRESETS[args.preset])
	for name in day_names:
		if name not in AVAILABLE_DAYS:
			print(f"Warning: {name} is not a standard day name")
	return day_names


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Lay out venue logos into Day Boxes and export a flyer.")
	parser.add_argument("manifest", help="logos.json manifest listing logo filenames.")
	parser.add_argument("-L", "--logo-dir", dest="logo_dir", default=None, help="Logo directory (default: manifest directory).")

	days_group = parser.add_argument_group("Days")
	days_group.add_argument("-d", "--days", dest="days", nargs="+", default=None, help="Day names, e.g. JUEVES VIERNES.")
	days_group.add_argument("-s", "--preset", dest="preset", default=DEFAULT_PRESET, help="Day preset name.")
	days_group.add_argument("-j", "--project", dest="project_path", default=None, help="Import a project JSON file.")
	days_group.add_argument(
		"-a",
		"--assign-response",
		dest="assign_response",
		default=None,
		help="JSON text returned by the AI logo assignment.",
	)

	ai_group = parser.add_argument_group("AI request")
	ai_group.add_argument("--prompt", dest="prompt", default=None, help="Free-text assignment request.")
	ai_group.add_argument("--reference", dest="reference_path", default=None, help="Reference flyer image.")
	ai_group.add_argument("--write-request", dest="request_path", default=None, help="Write the assignment payload JSON.")
	ai_group.add_argument("--theme", dest="theme", default=None, choices=sorted(THEME_QUERIES) + ["surprise"], help="Print the background search query.")

	layout_group = parser.add_argument_group("Layout")
	layout_group.add_argument("-r", "--overrides", dest="overrides_path", default=None, help="Override table JSON.")
	layout_group.add_argument("-x", "--extended-sizes", dest="extended_sizes", action="store_true", help="Allow logo sizes up to 2.5.")
	layout_group.add_argument("-X", "--no-extended-sizes", dest="extended_sizes", action="store_false", help="Cap logo sizes at 1.6.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output PNG path.")
	output_group.add_argument("-f", "--pdf", dest="pdf_path", default=None, help="Output PDF path.")
	output_group.add_argument("-k", "--pixel-ratio", dest="pixel_ratio", type=int, default=EXPORT_PIXEL_RATIO, help="PNG pixels per layout unit.")
	output_group.add_argument("-w", "--save-project", dest="save_project_path", default=None, help="Write the project JSON.")

	parser.set_defaults(extended_sizes=False)
	args = parser.parse_args(argv)
	return args


#============================================
def build_project(args: argparse.Namespace, logos: list) -> nf.project.FlyerProject:
	"""
	Build the starting project from a project file, an AI answer, or day names.

	Args:
		args: Parsed argparse namespace.
		logos: Loaded logos.

	Returns:
		FlyerProject.
	"""
	if args.project_path:
		project = nf.project.load_project(pathlib.Path(args.project_path))
		print(f"Project imported: {args.project_path}")
	else:
		project = nf.project.FlyerProject(day_boxes=nf.project.build_day_boxes(resolve_day_names(args)))

	if args.assign_response:
		response_text = pathlib.Path(args.assign_response).read_text(encoding="utf-8")
		day_names = [box.day_name for box in project.day_boxes]
		known_ids = {logo.id for logo in logos}
		project.day_boxes = nf.genai_lib.parse_assignment_response(response_text, day_names, known_ids)
		print(f"AI assignment applied: {args.assign_response}")
	return project


#============================================
def write_assignment_request(args: argparse.Namespace, project: nf.project.FlyerProject, logos: list) -> None:
	"""
	Write the AI assignment request payload and report its size.

	Args:
		args: Parsed argparse namespace.
		project: Current project.
		logos: Loaded logos.
	"""
	reference = None
	if args.reference_path:
		reference_path = pathlib.Path(args.reference_path)
		mime_type = mimetypes.guess_type(reference_path.name)[0] or "image/jpeg"
		reference = (reference_path.read_bytes(), mime_type)
	payload = nf.genai_lib.build_assignment_request(
		args.prompt or "",
		[box.day_name for box in project.day_boxes],
		[logo.id for logo in logos],
		reference_image=reference,
	)
	request_path = pathlib.Path(args.request_path)
	request_path.parent.mkdir(parents=True, exist_ok=True)
	request_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
	size = nf.genai_lib.payload_size_bytes(payload)
	print(f"Request written: {request_path} ({round(size / 1024)}KB)")
	if nf.genai_lib.exceeds_payload_limit(payload):
		oversized = nf.genai_lib.find_oversized_inline_parts(payload)
		print(f"Payload over limit; {len(oversized)} inline image(s) should be uploaded by reference")


#============================================
def print_layout_summary(layouts: list) -> None:
	for layout in layouts:
		if layout.is_empty:
			print(f"{layout.day_name}: {layout.placeholder}")
			continue
		print(f"{layout.day_name}: {len(layout.placed)} logos in {len(layout.rows)} rows, label scale {layout.label_scale:.3f}")
		for row in layout.rows:
			names = ", ".join(
				f"{placed.name}{'*' if placed.is_wide else ''} x{placed.display_scale:.2f}" for placed in row
			)
			print(f"  [{names}]")


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run the full pipeline from logo manifest to exported flyer.

	Args:
		args: Parsed argparse namespace.
	"""
	print("Night flyer pipeline")
	print(f"Manifest: {args.manifest}")
	if args.output_path:
		print(f"Output PNG: {args.output_path}")
	if args.pdf_path:
		print(f"Output PDF: {args.pdf_path}")
	print(f"Extended sizes: {args.extended_sizes}")

	start_time = time.perf_counter()
	logo_dir = pathlib.Path(args.logo_dir) if args.logo_dir else None
	logos = nf.logo_lib.load_logos(pathlib.Path(args.manifest), logo_dir, verbose=True)
	print(f"Logos loaded: {len(logos)}")

	project = build_project(args, logos)
	if args.request_path:
		write_assignment_request(args, project, logos)
	if args.theme:
		print(f"Background query: {nf.genai_lib.resolve_theme_query(args.theme)}")

	overrides = None
	if args.overrides_path:
		overrides = nf.overrides.load_override_table(pathlib.Path(args.overrides_path))
	daybox_config = build_daybox_config(args)
	export_config = build_export_config(args)
	composition = FlyerComposition(logos, project, overrides=overrides, config=daybox_config)

	measure_start = time.perf_counter()
	applied = asyncio.run(composition.refresh_all())
	forced = composition.measure_labels(nf.render.label_container_height(export_config))
	measure_end = time.perf_counter()
	print(f"Boxes measured: {applied}/{len(composition.boxes)}")
	if forced is not None:
		print(f"Shared label scale: {forced:.3f}")

	composition.clear_selection()
	layouts = composition.layout()
	print_layout_summary(layouts)

	render_start = time.perf_counter()
	if args.output_path:
		png_path = nf.render.render_flyer_png(
			layouts, composition.project, composition.logo_index, pathlib.Path(args.output_path), export_config
		)
		print(f"PNG written: {png_path}")
	if args.pdf_path:
		pdf_path = nf.render.render_flyer_pdf(
			layouts, composition.project, composition.logo_index, pathlib.Path(args.pdf_path), export_config
		)
		print(f"PDF written: {pdf_path}")
	render_end = time.perf_counter()

	if args.save_project_path:
		saved = nf.project.save_project(composition.project, pathlib.Path(args.save_project_path))
		print(f"Project written: {saved}")

	total_time = time.perf_counter() - start_time
	print(
		"Timing: measure={:.2f}s render={:.2f}s total={:.2f}s".format(
			measure_end - measure_start,
			render_end - render_start,
			total_time,
		)
	)


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	run_pipeline(args)
