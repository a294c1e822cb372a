"""
Flyer project state and its JSON project file.
"""

# Standard Library
import dataclasses
import enum
import json
import pathlib

# local repo modules
import night_flyer as nf
import night_flyer.config
import night_flyer.logo_lib


PROJECT_VERSION = 1
DEFAULT_PRIMARY_COLOR = nf.config.DEFAULT_PRIMARY_COLOR
DEFAULT_ACCENT_COLOR = nf.config.DEFAULT_ACCENT_COLOR
DEFAULT_SLOGAN_TEXT = nf.config.DEFAULT_SLOGAN_TEXT
DEFAULT_SLOGAN_FONT_SIZE = nf.config.DEFAULT_SLOGAN_FONT_SIZE
DEFAULT_SLOGAN_FONT_FAMILY = nf.config.DEFAULT_SLOGAN_FONT_FAMILY
DEFAULT_BACKGROUND_BLUR = nf.config.DEFAULT_BACKGROUND_BLUR
DEFAULT_BACKGROUND_BRIGHTNESS = nf.config.DEFAULT_BACKGROUND_BRIGHTNESS


class SloganStyle(enum.Enum):
	DEFAULT = "Default"
	NEON = "Neon"
	OUTLINE = "Outline"
	THREE_D = "3D"
	GLITCH = "Glitch"
	GRADIENT = "Gradient"


@dataclasses.dataclass
class DayBoxData:
	id: str
	day_name: str
	logo_ids: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Slogan:
	text: str = DEFAULT_SLOGAN_TEXT
	style: SloganStyle = SloganStyle.DEFAULT
	font_size: int = DEFAULT_SLOGAN_FONT_SIZE
	font_family: str = DEFAULT_SLOGAN_FONT_FAMILY


@dataclasses.dataclass
class Palette:
	primary: str = DEFAULT_PRIMARY_COLOR
	accent: str = DEFAULT_ACCENT_COLOR


@dataclasses.dataclass
class Background:
	# data URL or empty for the plain canvas color
	image: str = ""
	blur: float = DEFAULT_BACKGROUND_BLUR
	brightness: float = DEFAULT_BACKGROUND_BRIGHTNESS


@dataclasses.dataclass
class FlyerProject:
	day_boxes: list[DayBoxData] = dataclasses.field(default_factory=list)
	slogan: Slogan = dataclasses.field(default_factory=Slogan)
	palettes: list[Palette] = dataclasses.field(default_factory=lambda: [Palette()])
	selected_palette_index: int = 0
	background: Background = dataclasses.field(default_factory=Background)

	@property
	def palette(self) -> Palette:
		if not self.palettes:
			return Palette()
		index = min(max(self.selected_palette_index, 0), len(self.palettes) - 1)
		return self.palettes[index]


#============================================
def day_key(day_name: str) -> str:
	"""
	Build the lookup key for a day name.

	Args:
		day_name: Display name such as "SÁBADO".

	Returns:
		Lowercase key without accents, e.g. "sabado".
	"""
	return nf.logo_lib.strip_diacritics(day_name).lower().strip()


def day_box_id(day_name: str) -> str:
	return f"day-{day_key(day_name)}"


#============================================
def build_day_boxes(day_names: list[str]) -> list[DayBoxData]:
	"""
	Create empty day boxes for a list of day names.

	Args:
		day_names: Display names in order.

	Returns:
		List of DayBoxData.
	"""
	return [DayBoxData(id=day_box_id(name), day_name=name) for name in day_names]


#============================================
def project_to_dict(project: FlyerProject) -> dict:
	"""
	Serialize a project to the camelCase project-file layout.

	Args:
		project: Project state.

	Returns:
		JSON-ready dict.
	"""
	editor_state = {
		"dayBoxes": [
			{"id": box.id, "dayName": box.day_name, "logoIds": list(box.logo_ids)}
			for box in project.day_boxes
		],
		"slogan": {
			"text": project.slogan.text,
			"style": project.slogan.style.value,
			"fontSize": project.slogan.font_size,
			"fontFamily": project.slogan.font_family,
		},
		"palettes": [
			{"primary": palette.primary, "accent": palette.accent}
			for palette in project.palettes
		],
		"selectedPaletteIndex": project.selected_palette_index,
		"background": {
			"image": project.background.image,
			"blur": project.background.blur,
			"brightness": project.background.brightness,
		},
	}
	return {"version": PROJECT_VERSION, "editorState": editor_state}


#============================================
def _parse_day_boxes(raw_boxes) -> list[DayBoxData]:
	if not isinstance(raw_boxes, list):
		raise ValueError("editorState.dayBoxes must be a list")
	day_boxes = []
	seen_ids: set[str] = set()
	for raw in raw_boxes:
		if not isinstance(raw, dict) or "dayName" not in raw:
			raise ValueError(f"Invalid day box entry: {raw!r}")
		day_name = str(raw["dayName"])
		logo_ids = raw.get("logoIds", [])
		if not isinstance(logo_ids, list):
			raise ValueError(f"logoIds must be a list for {day_name}")
		box_id = str(raw.get("id") or day_box_id(day_name))
		if box_id in seen_ids:
			raise ValueError(f"Duplicate day box id: {box_id}")
		seen_ids.add(box_id)
		day_boxes.append(
			DayBoxData(
				id=box_id,
				day_name=day_name,
				logo_ids=[str(logo_id) for logo_id in logo_ids],
			)
		)
	return day_boxes


#============================================
def project_from_dict(data: dict) -> FlyerProject:
	"""
	Rebuild a project from a project-file dict.

	Only editorState.dayBoxes is required; the other sections fall back to
	defaults when missing.

	Args:
		data: Parsed project file.

	Returns:
		FlyerProject.
	"""
	if not isinstance(data, dict) or not isinstance(data.get("editorState"), dict):
		raise ValueError("Project file has no editorState object")
	state = data["editorState"]
	project = FlyerProject(day_boxes=_parse_day_boxes(state.get("dayBoxes", [])))

	slogan = state.get("slogan")
	if isinstance(slogan, dict):
		try:
			style = SloganStyle(slogan.get("style", SloganStyle.DEFAULT.value))
		except ValueError:
			print(f"Unknown slogan style {slogan.get('style')!r}, using Default")
			style = SloganStyle.DEFAULT
		project.slogan = Slogan(
			text=str(slogan.get("text", DEFAULT_SLOGAN_TEXT)),
			style=style,
			font_size=int(slogan.get("fontSize", DEFAULT_SLOGAN_FONT_SIZE)),
			font_family=str(slogan.get("fontFamily", DEFAULT_SLOGAN_FONT_FAMILY)),
		)

	palettes = state.get("palettes")
	if isinstance(palettes, list) and palettes:
		project.palettes = [
			Palette(primary=str(entry["primary"]), accent=str(entry["accent"]))
			for entry in palettes
			if isinstance(entry, dict) and "primary" in entry and "accent" in entry
		] or [Palette()]
	project.selected_palette_index = int(state.get("selectedPaletteIndex", 0))

	background = state.get("background")
	if isinstance(background, dict):
		project.background = Background(
			image=str(background.get("image", "")),
			blur=float(background.get("blur", DEFAULT_BACKGROUND_BLUR)),
			brightness=float(background.get("brightness", DEFAULT_BACKGROUND_BRIGHTNESS)),
		)
	return project


#============================================
def save_project(project: FlyerProject, path: pathlib.Path) -> pathlib.Path:
	"""
	Write a project file.

	Args:
		project: Project state.
		path: Output JSON path.

	Returns:
		The written path.
	"""
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(json.dumps(project_to_dict(project), indent=2, ensure_ascii=False), encoding="utf-8")
	return path


#============================================
def load_project(path: pathlib.Path) -> FlyerProject:
	"""
	Read a project file.

	Args:
		path: Project JSON path.

	Returns:
		FlyerProject.
	"""
	if not path.exists():
		raise FileNotFoundError(f"Project file not found: {path}")
	try:
		data = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as exc:
		raise ValueError(f"Project file is not valid JSON: {path}") from exc
	return project_from_dict(data)
