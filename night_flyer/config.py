"""
Shared configuration and constants.
"""

import dataclasses


ALPHA_THRESHOLD = 12
DEFAULT_IMAGE_SIZE = 128
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".svg", ".gif", ".bmp", ".avif")

RAW_SCALE_MIN = 0.6
RAW_SCALE_MAX = 1.9
DISPLAY_SCALE_MIN = 0.55
DISPLAY_SCALE_MAX = 2.2
GLOBAL_LOGO_SCALE = 1.5
OVERRIDE_ROUND_DIGITS = 3
WIDE_ASPECT_RATIO = 1.35
TOKEN_OVERLAP_MIN = 0.5

LOGO_SIZE_DEFAULT = 1.0
LOGO_SIZE_STEP = 0.1
LOGO_SIZE_MIN = 0.4
LOGO_SIZE_MAX = 1.6
LOGO_SIZE_MAX_EXTENDED = 2.5

MAX_ROWS = 3
LOGOS_PER_ROW_TARGET = 4

LABEL_FONT_NAME = "Helvetica-Bold"
LABEL_FONT_SIZE = 20.0
LABEL_LETTER_SPACING_EM = 0.4
LABEL_FILL_RATIO = 0.85
LABEL_SCALE_MIN = 0.5
LABEL_SCALE_MAX = 1.2
LABEL_DEBOUNCE_SECONDS = 0.01

EMPTY_BOX_PROMPT = "Haz clic para añadir logos"

CANVAS_WIDTH = 450
CANVAS_HEIGHT = 800
EXPORT_PIXEL_RATIO = 4
BOX_HEIGHT = 176.0
BOX_GAP = 8.0
CANVAS_PADDING = 6.0
LABEL_COLUMN_WIDTH = 36.0
BOX_INNER_PADDING = 4.0
BOX_FILL_ALPHA = 0x1A
SLOGAN_MARGIN_TOP = 12.0
EMPTY_CANVAS_COLOR = "#111827"
LOGO_BASE_FILL = 0.5
STACK_MAX_BOXES = 3
GRID_COLUMNS = 2

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
RASTER_FONT_CANDIDATES = (
	"/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
	"/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
	"/System/Library/Fonts/Supplemental/Arial Bold.ttf",
	"/Library/Fonts/Arial Bold.ttf",
	"C:\\Windows\\Fonts\\arialbd.ttf",
)
PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

DEFAULT_MODEL = "gemini-2.5-flash"
PAYLOAD_LIMIT_BYTES = 4 * 1024 * 1024
INLINE_THRESHOLD_BYTES = 500 * 1024

DEFAULT_PRIMARY_COLOR = "#FBBF24"
DEFAULT_ACCENT_COLOR = "#EC4899"
DEFAULT_SLOGAN_TEXT = "¡ESTO Y MUCHO MÁS!"
DEFAULT_SLOGAN_FONT_SIZE = 28
DEFAULT_SLOGAN_FONT_FAMILY = "Unbounded"
DEFAULT_BACKGROUND_BLUR = 2.0
DEFAULT_BACKGROUND_BRIGHTNESS = 50.0

AVAILABLE_DAYS = ["LUNES", "MARTES", "MIÉRCOLES", "JUEVES", "VIERNES", "SÁBADO", "DOMINGO"]
DAY_PRESETS = {
	"Jue-Sáb": ["JUEVES", "VIERNES", "SÁBADO"],
	"Mié-Vie": ["MIÉRCOLES", "JUEVES", "VIERNES"],
	"Vie-Dom": ["VIERNES", "SÁBADO", "DOMINGO"],
}
THEME_QUERIES = {
	"urban": "city night life, neon signs, urban street",
	"nature": "serene landscape, forest, mountains, waterfall",
	"cosmic": "galaxy, nebula, stars, space",
	"abstract": "abstract shapes, colorful liquid, light trails",
	"vintage": "retro, 1980s, vintage car, film grain",
}

# Tuned by eye against the venue logo pack; keys are normalized names.
MANUAL_SCALE_OVERRIDES = {
	"etnia": 1.35,
	"chaman": 0.85,
	"la vaca": 1.2,
	"sala el sotano": 0.9,
	"kapital club": 0.8,
	"golden ibiza": 1.15,
	"teatro barcelo": 0.88,
	"la riviera": 0.92,
	"opium": 1.25,
	"shoko": 1.1,
	"mamba negra": 1.18,
	"lula club": 1.3,
	"gabana": 0.86,
	"fitz club": 1.22,
}
MANUAL_WIDE_OVERRIDES = {
	"kapital club": True,
	"teatro barcelo": True,
	"la riviera": True,
	"gabana": True,
	"etnia": False,
	"opium": False,
	"shoko": False,
}


@dataclasses.dataclass
class DayBoxConfig:
	alpha_threshold: int
	raw_scale_min: float
	raw_scale_max: float
	display_scale_min: float
	display_scale_max: float
	global_logo_scale: float
	wide_aspect_ratio: float
	size_step: float
	size_min: float
	size_max: float
	label_fill_ratio: float
	label_scale_min: float
	label_scale_max: float
	label_debounce_seconds: float


@dataclasses.dataclass
class ExportConfig:
	canvas_width: int
	canvas_height: int
	pixel_ratio: int
	box_height: float
	box_gap: float
	canvas_padding: float
	label_column_width: float
	box_inner_padding: float


#============================================
def default_daybox_config(extended_size_range: bool = False) -> DayBoxConfig:
	"""
	Build the default Day Box configuration.

	Args:
		extended_size_range: Allow user sizes up to the extended maximum.

	Returns:
		DayBoxConfig.
	"""
	size_max = LOGO_SIZE_MAX_EXTENDED if extended_size_range else LOGO_SIZE_MAX
	return DayBoxConfig(
		alpha_threshold=ALPHA_THRESHOLD,
		raw_scale_min=RAW_SCALE_MIN,
		raw_scale_max=RAW_SCALE_MAX,
		display_scale_min=DISPLAY_SCALE_MIN,
		display_scale_max=DISPLAY_SCALE_MAX,
		global_logo_scale=GLOBAL_LOGO_SCALE,
		wide_aspect_ratio=WIDE_ASPECT_RATIO,
		size_step=LOGO_SIZE_STEP,
		size_min=LOGO_SIZE_MIN,
		size_max=size_max,
		label_fill_ratio=LABEL_FILL_RATIO,
		label_scale_min=LABEL_SCALE_MIN,
		label_scale_max=LABEL_SCALE_MAX,
		label_debounce_seconds=LABEL_DEBOUNCE_SECONDS,
	)


#============================================
def default_export_config(pixel_ratio: int = EXPORT_PIXEL_RATIO) -> ExportConfig:
	"""
	Build the default export configuration.

	Args:
		pixel_ratio: Output pixels per layout unit.

	Returns:
		ExportConfig.
	"""
	return ExportConfig(
		canvas_width=CANVAS_WIDTH,
		canvas_height=CANVAS_HEIGHT,
		pixel_ratio=pixel_ratio,
		box_height=BOX_HEIGHT,
		box_gap=BOX_GAP,
		canvas_padding=CANVAS_PADDING,
		label_column_width=LABEL_COLUMN_WIDTH,
		box_inner_padding=BOX_INNER_PADDING,
	)


#============================================
def clamp(value: float, low: float, high: float) -> float:
	"""
	Clamp a value into a closed range.

	Args:
		value: Input value.
		low: Lower bound.
		high: Upper bound.

	Returns:
		Clamped value.
	"""
	return max(low, min(high, value))
