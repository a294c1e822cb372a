"""
Request payloads and response parsing for the AI logo assignment and palette calls.
"""

# Standard Library
import base64
import binascii
import json
import random
import re

# local repo modules
import night_flyer as nf
import night_flyer.config
import night_flyer.project


DayBoxData = nf.project.DayBoxData
Palette = nf.project.Palette
day_key = nf.project.day_key

DEFAULT_MODEL = nf.config.DEFAULT_MODEL
PAYLOAD_LIMIT_BYTES = nf.config.PAYLOAD_LIMIT_BYTES
INLINE_THRESHOLD_BYTES = nf.config.INLINE_THRESHOLD_BYTES
THEME_QUERIES = nf.config.THEME_QUERIES
PALETTE_COUNT = 3
HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

ASSIGNMENT_INSTRUCTION = (
	"Eres un asistente de diseño de flyers de discotecas. Según la petición del "
	"usuario y la imagen de referencia opcional, decide qué logos aparecen en los "
	"días {days}. Usa solo nombres de archivo de la lista disponible. Responde con "
	"un objeto JSON con las claves {keys}; cada valor es un array de nombres de archivo."
)
PALETTE_PROMPT = (
	"Sugiere {count} paletas de color armoniosas para texto y efectos sobre esta "
	"imagen. Cada paleta tiene un color 'primary' claro de alto contraste (evita "
	"blanco puro en todas) y un color 'accent' vibrante. Devuelve un objeto JSON "
	"con la clave 'palettes', un array de objetos con 'primary' y 'accent' en hexadecimal."
)


#============================================
def inline_image_part(data: bytes, mime_type: str) -> dict:
	return {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(data).decode("ascii")}}


#============================================
def build_assignment_request(
	prompt: str,
	day_names: list[str],
	logo_names: list[str],
	reference_image: tuple[bytes, str] | None = None,
	model: str = DEFAULT_MODEL,
) -> dict:
	"""
	Build the payload asking the model which logos go on which day.

	Args:
		prompt: Free-text user request.
		day_names: Selected day names in order.
		logo_names: Available logo filenames.
		reference_image: Optional (bytes, mime type) reference flyer.
		model: Model name.

	Returns:
		JSON-ready request payload.
	"""
	if not day_names:
		raise ValueError("At least one day is required for logo assignment")
	keys = [day_key(name) for name in day_names]
	properties = {}
	for name, key in zip(day_names, keys):
		properties[key] = {
			"type": "array",
			"description": f"Logos para el {name}.",
			"items": {"type": "string"},
		}
	parts = [
		{"text": f'Petición del usuario: "{prompt}"'},
		{"text": f"Nombres de archivo de los logos disponibles: {json.dumps(logo_names, ensure_ascii=False)}"},
	]
	if reference_image is not None:
		data, mime_type = reference_image
		parts.insert(0, inline_image_part(data, mime_type))
	instruction = ASSIGNMENT_INSTRUCTION.format(
		days=", ".join(day_names),
		keys=", ".join(f"'{key}'" for key in keys),
	)
	return {
		"model": model,
		"contents": {"parts": parts},
		"config": {
			"systemInstruction": instruction,
			"responseMimeType": "application/json",
			"responseSchema": {"type": "object", "properties": properties, "required": keys},
		},
	}


#============================================
def _response_object(response_text: str) -> dict:
	try:
		data = json.loads(response_text)
	except (TypeError, json.JSONDecodeError) as exc:
		raise ValueError("AI response is not valid JSON") from exc
	if not isinstance(data, dict):
		raise ValueError("AI response must be a JSON object")
	return data


#============================================
def parse_assignment_response(
	response_text: str,
	day_names: list[str],
	known_logo_ids: set[str] | None = None,
) -> list[DayBoxData]:
	"""
	Turn the model's JSON answer into day boxes.

	Args:
		response_text: The "text" field of the model response.
		day_names: Day names used in the request, in order.
		known_logo_ids: Logo ids that exist; others are dropped with a warning.

	Returns:
		DayBoxData list in day order.
	"""
	data = _response_object(response_text)
	day_boxes = []
	for name in day_names:
		key = day_key(name)
		raw_ids = data.get(key) or []
		if not isinstance(raw_ids, list):
			print(f"AI response for {key} is not a list, ignoring")
			raw_ids = []
		logo_ids = []
		for raw_id in raw_ids:
			logo_id = str(raw_id)
			if known_logo_ids is not None and logo_id not in known_logo_ids:
				print(f"AI suggested unknown logo {logo_id} for {name}, dropping")
				continue
			if logo_id not in logo_ids:
				logo_ids.append(logo_id)
		day_boxes.append(DayBoxData(id=nf.project.day_box_id(name), day_name=name, logo_ids=logo_ids))
	return day_boxes


#============================================
def build_palette_request(image_data: bytes, mime_type: str = "image/jpeg", model: str = DEFAULT_MODEL) -> dict:
	"""
	Build the payload asking for palettes that read well over a background.

	Args:
		image_data: Background image bytes.
		mime_type: Image mime type.
		model: Model name.

	Returns:
		JSON-ready request payload.
	"""
	palette_schema = {
		"type": "object",
		"properties": {
			"primary": {"type": "string", "description": "High-contrast primary color for text."},
			"accent": {"type": "string", "description": "Vibrant accent color for effects."},
		},
		"required": ["primary", "accent"],
	}
	return {
		"model": model,
		"contents": [
			{
				"parts": [
					inline_image_part(image_data, mime_type),
					{"text": PALETTE_PROMPT.format(count=PALETTE_COUNT)},
				]
			}
		],
		"config": {
			"responseMimeType": "application/json",
			"responseSchema": {
				"type": "object",
				"properties": {
					"palettes": {
						"type": "array",
						"description": f"An array of {PALETTE_COUNT} color palettes.",
						"items": palette_schema,
					}
				},
				"required": ["palettes"],
			},
		},
	}


#============================================
def is_hex_color(value) -> bool:
	return isinstance(value, str) and bool(HEX_COLOR_RE.match(value))


#============================================
def parse_palette_response(response_text: str) -> list[Palette]:
	"""
	Parse palettes from the model's JSON answer.

	Entries without two valid hex colors are skipped.

	Args:
		response_text: The "text" field of the model response.

	Returns:
		Palette list, possibly empty.
	"""
	data = _response_object(response_text)
	raw_palettes = data.get("palettes")
	if not isinstance(raw_palettes, list):
		raise ValueError("AI palette response has no 'palettes' array")
	palettes = []
	for entry in raw_palettes:
		if not isinstance(entry, dict):
			continue
		primary = entry.get("primary")
		accent = entry.get("accent")
		if not is_hex_color(primary) or not is_hex_color(accent):
			print(f"Skipping invalid palette entry: {entry}")
			continue
		palettes.append(Palette(primary=primary, accent=accent))
	return palettes


def fallback_palettes() -> list[Palette]:
	return [Palette()]


#============================================
def resolve_theme_query(theme: str, rng: random.Random | None = None) -> str:
	"""
	Map a background theme to its image search query.

	Args:
		theme: Theme key or "surprise" for a random theme.
		rng: Random source for "surprise".

	Returns:
		Search query; unknown themes fall back to the urban query.
	"""
	if theme == "surprise":
		rng = rng or random.Random()
		theme = rng.choice(sorted(THEME_QUERIES))
	return THEME_QUERIES.get(theme, THEME_QUERIES["urban"])


#============================================
def payload_size_bytes(payload: dict) -> int:
	return len(json.dumps(payload, ensure_ascii=False).encode("utf-8"))


def exceeds_payload_limit(payload: dict, limit: int = PAYLOAD_LIMIT_BYTES) -> bool:
	return payload_size_bytes(payload) > limit


#============================================
def _iter_parts(contents):
	if isinstance(contents, dict):
		contents = [contents]
	if not isinstance(contents, list):
		return
	for content in contents:
		if not isinstance(content, dict):
			continue
		parts = content.get("parts")
		if isinstance(parts, list):
			yield from parts


#============================================
def find_oversized_inline_parts(payload: dict, threshold: int = INLINE_THRESHOLD_BYTES) -> list[dict]:
	"""
	List inline image parts too large to send inline.

	Those parts should be uploaded and referenced instead.

	Args:
		payload: Request payload.
		threshold: Maximum decoded inline size in bytes.

	Returns:
		Oversized parts in payload order.
	"""
	oversized = []
	for part in _iter_parts(payload.get("contents")):
		if not isinstance(part, dict):
			continue
		inline = part.get("inlineData")
		if not isinstance(inline, dict) or not inline.get("data"):
			continue
		raw = str(inline["data"])
		if "base64," in raw:
			raw = raw.split("base64,", 1)[1]
		try:
			size = len(base64.b64decode(raw, validate=False))
		except binascii.Error:
			print("Inline part holds invalid base64, treating it as oversized")
			oversized.append(part)
			continue
		if size > threshold:
			oversized.append(part)
	return oversized
