"""
Flyer export: box geometry, PNG rendering with Pillow, and PDF rendering with ReportLab.
"""

# Standard Library
import dataclasses
import io
import math
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import PIL.ImageEnhance
import PIL.ImageFilter
import PIL.ImageFont
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import night_flyer as nf
import night_flyer.config
import night_flyer.daybox
import night_flyer.logo_lib
import night_flyer.project


DayBoxLayout = nf.daybox.DayBoxLayout
PlacedLogo = nf.daybox.PlacedLogo
ExportConfig = nf.config.ExportConfig
FlyerProject = nf.project.FlyerProject
SloganStyle = nf.project.SloganStyle
Logo = nf.logo_lib.Logo

BOX_FILL_ALPHA = nf.config.BOX_FILL_ALPHA
EMPTY_CANVAS_COLOR = nf.config.EMPTY_CANVAS_COLOR
GLOBAL_LOGO_SCALE = nf.config.GLOBAL_LOGO_SCALE
GRID_COLUMNS = nf.config.GRID_COLUMNS
LABEL_FONT_NAME = nf.config.LABEL_FONT_NAME
LABEL_FONT_SIZE = nf.config.LABEL_FONT_SIZE
LABEL_LETTER_SPACING_EM = nf.config.LABEL_LETTER_SPACING_EM
LOGO_BASE_FILL = nf.config.LOGO_BASE_FILL
RASTER_FONT_CANDIDATES = nf.config.RASTER_FONT_CANDIDATES
SLOGAN_MARGIN_TOP = nf.config.SLOGAN_MARGIN_TOP
STACK_MAX_BOXES = nf.config.STACK_MAX_BOXES
DEFAULT_FONT_BOLD = nf.config.DEFAULT_FONT_BOLD


@dataclasses.dataclass(frozen=True)
class BoxFrame:
	x: float
	y: float
	width: float
	height: float


#============================================
def parse_hex_color(value: str) -> tuple[int, int, int]:
	"""
	Parse a hex color string into 8-bit RGB.

	Args:
		value: Color string like "#AABBCC" or "#ABC".

	Returns:
		Tuple of (r, g, b); black for anything unparseable.
	"""
	if not value or not value.startswith("#"):
		return (0, 0, 0)
	digits = value[1:]
	if len(digits) == 3:
		digits = "".join(char * 2 for char in digits)
	if len(digits) not in (6, 8):
		return (0, 0, 0)
	try:
		return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
	except ValueError:
		return (0, 0, 0)


def rgb_floats(color: tuple[int, int, int]) -> tuple[float, float, float]:
	return (color[0] / 255.0, color[1] / 255.0, color[2] / 255.0)


#============================================
def compute_box_frames(count: int, config: ExportConfig) -> list[BoxFrame]:
	"""
	Place Day Boxes on the canvas.

	Up to three boxes stack in one column; more boxes use a two-column grid.
	Coordinates are layout units with a top-left origin.

	Args:
		count: Number of boxes.
		config: Export configuration.

	Returns:
		BoxFrame list in day order.
	"""
	if count <= 0:
		return []
	columns = 1 if count <= STACK_MAX_BOXES else GRID_COLUMNS
	inner_width = config.canvas_width - 2 * config.canvas_padding
	box_width = (inner_width - (columns - 1) * config.box_gap) / columns
	frames = []
	for index in range(count):
		row = index // columns
		column = index % columns
		frames.append(
			BoxFrame(
				x=config.canvas_padding + column * (box_width + config.box_gap),
				y=config.canvas_padding + row * (config.box_height + config.box_gap),
				width=box_width,
				height=config.box_height,
			)
		)
	return frames


def label_container_height(config: ExportConfig) -> float:
	return config.box_height - 2 * config.box_inner_padding


#============================================
def compute_logo_slot(frame: BoxFrame, placed: PlacedLogo, row_count: int, config: ExportConfig) -> BoxFrame:
	"""
	Compute the slot one placed logo occupies inside its box.

	Args:
		frame: Box frame.
		placed: Placed logo.
		row_count: Number of rows in the box.
		config: Export configuration.

	Returns:
		Slot frame in layout units.
	"""
	area_x = frame.x + config.label_column_width + config.box_inner_padding
	area_y = frame.y + config.box_inner_padding
	area_width = frame.width - config.label_column_width - 2 * config.box_inner_padding
	area_height = frame.height - 2 * config.box_inner_padding
	row_height = area_height / max(1, row_count)
	slot_width = area_width / max(1, placed.row_length)
	return BoxFrame(
		x=area_x + placed.column * slot_width,
		y=area_y + placed.row * row_height,
		width=slot_width,
		height=row_height,
	)


#============================================
def compute_logo_rect(slot: BoxFrame, image_size: tuple[int, int], display_scale: float) -> BoxFrame:
	"""
	Contain-fit a logo into its slot and apply its display scale.

	At the neutral display scale the logo fills LOGO_BASE_FILL of the slot.

	Args:
		slot: Slot frame.
		image_size: Source (width, height) in pixels.
		display_scale: Final applied scale.

	Returns:
		Logo frame centered on the slot.
	"""
	image_width, image_height = image_size
	if image_width <= 0 or image_height <= 0:
		return BoxFrame(slot.x + slot.width / 2.0, slot.y + slot.height / 2.0, 0.0, 0.0)
	fit = min(slot.width / image_width, slot.height / image_height)
	factor = fit * LOGO_BASE_FILL * display_scale / GLOBAL_LOGO_SCALE
	width = image_width * factor
	height = image_height * factor
	return BoxFrame(
		x=slot.x + (slot.width - width) / 2.0,
		y=slot.y + (slot.height - height) / 2.0,
		width=width,
		height=height,
	)


#============================================
def load_raster_font(size: int) -> PIL.ImageFont.FreeTypeFont | PIL.ImageFont.ImageFont:
	"""
	Load a bold TrueType font, falling back to Pillow's built-in font.

	Args:
		size: Font size in pixels.

	Returns:
		Pillow font.
	"""
	size = max(1, int(size))
	for candidate in RASTER_FONT_CANDIDATES:
		path = pathlib.Path(candidate)
		if not path.exists():
			continue
		try:
			return PIL.ImageFont.truetype(str(path), size=size)
		except OSError:
			continue
	return PIL.ImageFont.load_default(size=size)


#============================================
def render_spaced_text(
	text: str,
	font: PIL.ImageFont.FreeTypeFont | PIL.ImageFont.ImageFont,
	fill: tuple[int, int, int, int],
	spacing: float,
) -> PIL.Image.Image:
	"""
	Render one line of letter-spaced text on a transparent image.

	Args:
		text: Text content.
		font: Pillow font.
		fill: RGBA fill.
		spacing: Extra pixels after each character.

	Returns:
		RGBA image tightly sized to the text run.
	"""
	advances = [font.getlength(char) for char in text]
	width = max(1, int(math.ceil(sum(advances) + spacing * len(text))))
	_left, _top, _right, bottom = font.getbbox(text or " ")
	height = max(1, int(math.ceil(bottom)))
	image = PIL.Image.new("RGBA", (width, height), (0, 0, 0, 0))
	draw = PIL.ImageDraw.Draw(image)
	x = 0.0
	for char, advance in zip(text, advances):
		draw.text((x, 0), char, font=font, fill=fill)
		x += advance + spacing
	return image


#============================================
def build_background(project: FlyerProject, size: tuple[int, int], pixel_ratio: float) -> PIL.Image.Image:
	"""
	Build the blurred and darkened background layer.

	Args:
		project: Project state.
		size: Output size in pixels.
		pixel_ratio: Pixels per layout unit.

	Returns:
		RGBA background image.
	"""
	background = project.background
	if not background.image:
		return PIL.Image.new("RGBA", size, parse_hex_color(EMPTY_CANVAS_COLOR) + (255,))
	data, _mime_type = nf.logo_lib.parse_data_url(background.image)
	with PIL.Image.open(io.BytesIO(data)) as source:
		image = resize_cover(source.convert("RGB"), size)
	if background.blur > 0:
		image = image.filter(PIL.ImageFilter.GaussianBlur(radius=background.blur * pixel_ratio))
	image = PIL.ImageEnhance.Brightness(image).enhance(max(0.0, background.brightness) / 100.0)
	return image.convert("RGBA")


#============================================
def resize_cover(image: PIL.Image.Image, size: tuple[int, int]) -> PIL.Image.Image:
	"""
	Resize to cover the target size, then center-crop.

	Args:
		image: Source image.
		size: Target (width, height).

	Returns:
		Resized image.
	"""
	target_width, target_height = size
	width, height = image.size
	if width <= 0 or height <= 0:
		return image.resize(size, PIL.Image.Resampling.LANCZOS)
	scale = max(target_width / width, target_height / height)
	new_width = max(target_width, int(round(width * scale)))
	new_height = max(target_height, int(round(height * scale)))
	resized = image.resize((new_width, new_height), PIL.Image.Resampling.LANCZOS)
	left = (new_width - target_width) // 2
	top = (new_height - target_height) // 2
	return resized.crop((left, top, left + target_width, top + target_height))


#============================================
def _to_pixels(frame: BoxFrame, ratio: float) -> tuple[int, int, int, int]:
	return (
		int(round(frame.x * ratio)),
		int(round(frame.y * ratio)),
		int(round((frame.x + frame.width) * ratio)),
		int(round((frame.y + frame.height) * ratio)),
	)


#============================================
def draw_box_png(
	canvas: PIL.Image.Image,
	frame: BoxFrame,
	layout: DayBoxLayout,
	logo_index: dict[str, Logo],
	primary: tuple[int, int, int],
	config: ExportConfig,
) -> PIL.Image.Image:
	"""
	Draw one Day Box: tinted panel, rotated label, and logos.

	Args:
		canvas: RGBA canvas.
		frame: Box frame in layout units.
		layout: Day Box layout.
		logo_index: Logos keyed by id.
		primary: Primary palette color.
		config: Export configuration.

	Returns:
		The updated canvas.
	"""
	ratio = config.pixel_ratio
	panel = PIL.Image.new("RGBA", canvas.size, (0, 0, 0, 0))
	draw = PIL.ImageDraw.Draw(panel)
	box_pixels = _to_pixels(frame, ratio)
	draw.rounded_rectangle(
		box_pixels,
		radius=int(8 * ratio),
		fill=primary + (BOX_FILL_ALPHA,),
		outline=primary + (96,),
		width=max(1, int(ratio)),
	)
	canvas = PIL.Image.alpha_composite(canvas, panel)

	# label reads bottom to top inside the left column
	font = load_raster_font(LABEL_FONT_SIZE * layout.label_scale * ratio)
	spacing = LABEL_LETTER_SPACING_EM * LABEL_FONT_SIZE * layout.label_scale * ratio
	label = render_spaced_text(layout.day_name, font, primary + (255,), spacing).rotate(90, expand=True)
	column_center_x = (frame.x + config.label_column_width / 2.0) * ratio
	column_center_y = (frame.y + frame.height / 2.0) * ratio
	canvas.alpha_composite(
		label,
		dest=(
			max(0, int(round(column_center_x - label.width / 2.0))),
			max(0, int(round(column_center_y - label.height / 2.0))),
		),
	)

	if layout.is_empty:
		hint_font = load_raster_font(11 * ratio)
		hint = render_spaced_text(layout.placeholder or "", hint_font, (255, 255, 255, 160), 0.0)
		hint_x = (frame.x + config.label_column_width + (frame.width - config.label_column_width) / 2.0) * ratio
		hint_y = column_center_y
		canvas.alpha_composite(
			hint,
			dest=(max(0, int(round(hint_x - hint.width / 2.0))), max(0, int(round(hint_y - hint.height / 2.0)))),
		)
		return canvas

	row_count = len(layout.rows)
	for placed in layout.placed:
		logo = logo_index.get(placed.logo_id)
		if logo is None:
			continue
		try:
			with nf.logo_lib.open_logo_image(logo) as source:
				image = source.convert("RGBA")
		except (OSError, ValueError, PIL.Image.DecompressionBombError) as exc:
			print(f"Skipping logo {logo.name} during export: {exc}")
			continue
		slot = compute_logo_slot(frame, placed, row_count, config)
		rect = compute_logo_rect(slot, image.size, placed.display_scale)
		left, top, right, bottom = _to_pixels(rect, ratio)
		if right - left <= 0 or bottom - top <= 0:
			continue
		resized = image.resize((right - left, bottom - top), PIL.Image.Resampling.LANCZOS)
		layer = PIL.Image.new("RGBA", canvas.size, (0, 0, 0, 0))
		layer.paste(resized, (left, top), resized)
		canvas = PIL.Image.alpha_composite(canvas, layer)
	return canvas


#============================================
def render_slogan_layer(
	text: str,
	style: SloganStyle,
	font: PIL.ImageFont.FreeTypeFont | PIL.ImageFont.ImageFont,
	primary: tuple[int, int, int],
	accent: tuple[int, int, int],
	ratio: float,
) -> PIL.Image.Image:
	"""
	Render the slogan in one of the slogan styles.

	Args:
		text: Slogan text.
		style: SloganStyle.
		font: Pillow font.
		primary: Primary palette color.
		accent: Accent palette color.
		ratio: Pixels per layout unit.

	Returns:
		RGBA image of the styled slogan.
	"""
	pad = int(8 * ratio)
	_left, _top, right, bottom = font.getbbox(text or " ")
	size = (int(math.ceil(right)) + 2 * pad, int(math.ceil(bottom)) + 2 * pad)
	layer = PIL.Image.new("RGBA", size, (0, 0, 0, 0))
	draw = PIL.ImageDraw.Draw(layer)
	origin = (pad, pad)
	offset = max(1, int(2 * ratio))

	if style == SloganStyle.NEON:
		glow = PIL.Image.new("RGBA", size, (0, 0, 0, 0))
		PIL.ImageDraw.Draw(glow).text(origin, text, font=font, fill=accent + (255,))
		layer = PIL.Image.alpha_composite(layer, glow.filter(PIL.ImageFilter.GaussianBlur(radius=4 * ratio)))
		draw = PIL.ImageDraw.Draw(layer)
		draw.text(origin, text, font=font, fill=(255, 255, 255, 255))
	elif style == SloganStyle.OUTLINE:
		draw.text(origin, text, font=font, fill=(0, 0, 0, 0), stroke_width=offset, stroke_fill=primary + (255,))
	elif style == SloganStyle.THREE_D:
		for step in range(3, 0, -1):
			draw.text((origin[0] + step * offset, origin[1] + step * offset), text, font=font, fill=accent + (255,))
		draw.text(origin, text, font=font, fill=primary + (255,))
	elif style == SloganStyle.GLITCH:
		draw.text((origin[0] - offset, origin[1]), text, font=font, fill=accent + (200,))
		draw.text((origin[0] + offset, origin[1]), text, font=font, fill=(0, 255, 255, 200))
		draw.text(origin, text, font=font, fill=primary + (255,))
	elif style == SloganStyle.GRADIENT:
		mask = PIL.Image.new("L", size, 0)
		PIL.ImageDraw.Draw(mask).text(origin, text, font=font, fill=255)
		gradient = PIL.Image.new("RGBA", size)
		gradient_draw = PIL.ImageDraw.Draw(gradient)
		for x in range(size[0]):
			mix = x / max(1, size[0] - 1)
			color = tuple(int(round(primary[i] + (accent[i] - primary[i]) * mix)) for i in range(3))
			gradient_draw.line([(x, 0), (x, size[1])], fill=color + (255,))
		layer.paste(gradient, (0, 0), mask)
	else:
		draw.text(origin, text, font=font, fill=primary + (255,))
	return layer


#============================================
def render_flyer_image(
	layouts: list[DayBoxLayout],
	project: FlyerProject,
	logo_index: dict[str, Logo],
	config: ExportConfig,
) -> PIL.Image.Image:
	"""
	Render the whole flyer to an RGBA image.

	Args:
		layouts: Day Box layouts in day order.
		project: Project state with palette, slogan, and background.
		logo_index: Logos keyed by id.
		config: Export configuration.

	Returns:
		RGBA image of canvas size times the pixel ratio.
	"""
	ratio = config.pixel_ratio
	size = (int(config.canvas_width * ratio), int(config.canvas_height * ratio))
	canvas = build_background(project, size, ratio)
	primary = parse_hex_color(project.palette.primary)
	accent = parse_hex_color(project.palette.accent)

	frames = compute_box_frames(len(layouts), config)
	for index, (frame, layout) in enumerate(zip(frames, layouts), start=1):
		canvas = draw_box_png(canvas, frame, layout, logo_index, primary, config)
		nf.logo_lib.print_progress("Rendering boxes", index, len(layouts))
	if layouts:
		print()

	slogan = project.slogan
	if slogan.text:
		font = load_raster_font(slogan.font_size * ratio)
		layer = render_slogan_layer(slogan.text, slogan.style, font, primary, accent, ratio)
		boxes_bottom = frames[-1].y + frames[-1].height if frames else config.canvas_padding
		x = int(round((size[0] - layer.width) / 2.0))
		y = int(round((boxes_bottom + SLOGAN_MARGIN_TOP) * ratio))
		if y < size[1]:
			canvas.alpha_composite(layer, dest=(max(0, x), y))
	return canvas


#============================================
def render_flyer_png(
	layouts: list[DayBoxLayout],
	project: FlyerProject,
	logo_index: dict[str, Logo],
	output_path: pathlib.Path,
	config: ExportConfig,
) -> pathlib.Path:
	"""
	Export the flyer as a PNG.

	Args:
		layouts: Day Box layouts.
		project: Project state.
		logo_index: Logos keyed by id.
		output_path: Output PNG path.
		config: Export configuration.

	Returns:
		The written path.
	"""
	output_path.parent.mkdir(parents=True, exist_ok=True)
	image = render_flyer_image(layouts, project, logo_index, config)
	image.convert("RGB").save(output_path, format="PNG")
	return output_path


#============================================
def draw_box_pdf(
	pdf: reportlab.pdfgen.canvas.Canvas,
	frame: BoxFrame,
	layout: DayBoxLayout,
	logo_index: dict[str, Logo],
	primary: tuple[int, int, int],
	config: ExportConfig,
) -> None:
	"""
	Draw one Day Box onto the PDF canvas.

	Args:
		pdf: ReportLab canvas.
		frame: Box frame in layout units, top-left origin.
		layout: Day Box layout.
		logo_index: Logos keyed by id.
		primary: Primary palette color.
		config: Export configuration.
	"""
	page_height = config.canvas_height
	red, green, blue = rgb_floats(primary)
	pdf.saveState()
	pdf.setFillColorRGB(red, green, blue, alpha=BOX_FILL_ALPHA / 255.0)
	pdf.setStrokeColorRGB(red, green, blue, alpha=0.4)
	pdf.roundRect(frame.x, page_height - frame.y - frame.height, frame.width, frame.height, 8, stroke=1, fill=1)
	pdf.restoreState()

	font_size = LABEL_FONT_SIZE * layout.label_scale
	label_width = pdf.stringWidth(layout.day_name, LABEL_FONT_NAME, font_size)
	label_width += LABEL_LETTER_SPACING_EM * font_size * len(layout.day_name)
	pdf.saveState()
	pdf.translate(frame.x + config.label_column_width / 2.0 + font_size / 3.0, page_height - frame.y - frame.height / 2.0)
	pdf.rotate(90)
	text = pdf.beginText(-label_width / 2.0, 0)
	text.setFont(LABEL_FONT_NAME, font_size)
	text.setCharSpace(LABEL_LETTER_SPACING_EM * font_size)
	text.setFillColorRGB(red, green, blue)
	text.textOut(layout.day_name)
	pdf.drawText(text)
	pdf.restoreState()

	row_count = len(layout.rows)
	for placed in layout.placed:
		logo = logo_index.get(placed.logo_id)
		if logo is None:
			continue
		try:
			with nf.logo_lib.open_logo_image(logo) as source:
				image = source.convert("RGBA")
		except (OSError, ValueError, PIL.Image.DecompressionBombError) as exc:
			print(f"Skipping logo {logo.name} during export: {exc}")
			continue
		slot = compute_logo_slot(frame, placed, row_count, config)
		rect = compute_logo_rect(slot, image.size, placed.display_scale)
		if rect.width <= 0 or rect.height <= 0:
			continue
		pdf.drawImage(
			reportlab.lib.utils.ImageReader(image),
			rect.x,
			page_height - rect.y - rect.height,
			width=rect.width,
			height=rect.height,
			mask="auto",
			preserveAspectRatio=False,
			anchor="sw",
		)


#============================================
def render_flyer_pdf(
	layouts: list[DayBoxLayout],
	project: FlyerProject,
	logo_index: dict[str, Logo],
	output_path: pathlib.Path,
	config: ExportConfig,
) -> pathlib.Path:
	"""
	Export the flyer as a single-page PDF at canvas size in points.

	Args:
		layouts: Day Box layouts.
		project: Project state.
		logo_index: Logos keyed by id.
		output_path: Output PDF path.
		config: Export configuration.

	Returns:
		The written path.
	"""
	output_path.parent.mkdir(parents=True, exist_ok=True)
	page_width = config.canvas_width
	page_height = config.canvas_height
	pdf = reportlab.pdfgen.canvas.Canvas(str(output_path), pagesize=(page_width, page_height))

	background = build_background(project, (int(page_width * config.pixel_ratio), int(page_height * config.pixel_ratio)), config.pixel_ratio)
	pdf.drawImage(
		reportlab.lib.utils.ImageReader(background.convert("RGB")),
		0,
		0,
		width=page_width,
		height=page_height,
	)
	primary = parse_hex_color(project.palette.primary)
	frames = compute_box_frames(len(layouts), config)
	for frame, layout in zip(frames, layouts):
		draw_box_pdf(pdf, frame, layout, logo_index, primary, config)

	slogan = project.slogan
	if slogan.text:
		boxes_bottom = frames[-1].y + frames[-1].height if frames else config.canvas_padding
		baseline = page_height - boxes_bottom - SLOGAN_MARGIN_TOP - slogan.font_size
		if baseline > 0:
			pdf.setFont(DEFAULT_FONT_BOLD, slogan.font_size)
			pdf.setFillColorRGB(*rgb_floats(primary))
			pdf.drawCentredString(page_width / 2.0, baseline, slogan.text)
	pdf.showPage()
	pdf.save()
	return output_path
