"""
Logo records, manifest loading, and name normalization.
"""

# Standard Library
import asyncio
import base64
import dataclasses
import io
import json
import pathlib
import re
import unicodedata

# PIP3 modules
import PIL.Image

# local repo modules
import night_flyer as nf
import night_flyer.config


IMAGE_EXTENSIONS = nf.config.IMAGE_EXTENSIONS
PROGRESS_BAR_WIDTH = nf.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = nf.config.PROGRESS_UPDATE_EVERY


@dataclasses.dataclass(frozen=True)
class Logo:
	id: str
	name: str
	data: bytes | None = None
	path: pathlib.Path | None = None


#============================================
def strip_diacritics(value: str) -> str:
	"""
	Decompose text and drop combining marks.

	Args:
		value: Input text.

	Returns:
		Text without accents.
	"""
	decomposed = unicodedata.normalize("NFD", value)
	return "".join(char for char in decomposed if not unicodedata.combining(char))


#============================================
def normalize_name(value: str) -> str:
	"""
	Normalize a logo name for override lookups.

	Known image extensions are stripped, accents removed, the text lowercased,
	and runs of non-alphanumeric characters collapsed to one space.

	Args:
		value: Raw logo name or filename.

	Returns:
		Normalized name.
	"""
	if not value:
		return ""
	text = value.strip()
	lowered = text.lower()
	for extension in IMAGE_EXTENSIONS:
		if lowered.endswith(extension):
			text = text[: -len(extension)]
			break
	text = strip_diacritics(text).lower()
	text = re.sub(r"[^a-z0-9]+", " ", text)
	return text.strip()


#============================================
def parse_data_url(value: str) -> tuple[bytes, str]:
	"""
	Decode a base64 data URL.

	Args:
		value: String like "data:image/png;base64,....".

	Returns:
		Tuple of (payload bytes, mime type).
	"""
	if not value.startswith("data:") or "," not in value:
		raise ValueError("Not a data URL")
	header, _, payload = value.partition(",")
	mime_type = header[len("data:"):].split(";", 1)[0] or "application/octet-stream"
	if ";base64" not in header:
		raise ValueError("Only base64 data URLs are supported")
	return (base64.b64decode(payload), mime_type)


#============================================
def build_data_url(data: bytes, mime_type: str) -> str:
	"""
	Encode bytes as a base64 data URL.

	Args:
		data: Payload bytes.
		mime_type: MIME type for the header.

	Returns:
		Data URL string.
	"""
	encoded = base64.b64encode(data).decode("ascii")
	return f"data:{mime_type};base64,{encoded}"


#============================================
def open_logo_image(logo: Logo) -> PIL.Image.Image:
	"""
	Open a logo image without decoding its pixels.

	Args:
		logo: Logo record.

	Returns:
		Lazily loaded PIL image.
	"""
	if logo.data is not None:
		return PIL.Image.open(io.BytesIO(logo.data))
	if logo.path is not None:
		return PIL.Image.open(logo.path)
	raise ValueError(f"Logo {logo.id} has no image data")


#============================================
async def load_logo_image(logo: Logo) -> PIL.Image.Image:
	"""
	Default async loader used by the bounding-box analyzer.

	Args:
		logo: Logo record.

	Returns:
		Lazily loaded PIL image.
	"""
	await asyncio.sleep(0)
	return open_logo_image(logo)


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def read_manifest(manifest_path: pathlib.Path) -> list[str]:
	"""
	Read the list of logo filenames from a JSON manifest.

	Args:
		manifest_path: Path to logos.json.

	Returns:
		List of filenames.
	"""
	if not manifest_path.exists():
		raise FileNotFoundError(f"Logo manifest not found: {manifest_path}")
	text = manifest_path.read_text(encoding="utf-8")
	filenames = json.loads(text)
	if not isinstance(filenames, list) or not filenames:
		raise ValueError(f"Logo manifest is empty or malformed: {manifest_path}")
	return [str(name) for name in filenames]


#============================================
def load_logos(manifest_path: pathlib.Path, logo_dir: pathlib.Path | None = None, verbose: bool = False) -> list[Logo]:
	"""
	Load every logo listed in a manifest.

	Missing or unreadable files are skipped with a warning.

	Args:
		manifest_path: Path to logos.json.
		logo_dir: Directory holding the logo files, defaults to the manifest folder.
		verbose: Print a progress bar.

	Returns:
		List of Logo records in manifest order.
	"""
	filenames = read_manifest(manifest_path)
	if logo_dir is None:
		logo_dir = manifest_path.parent
	logos: list[Logo] = []
	skipped: list[str] = []
	total = len(filenames)
	for index, filename in enumerate(filenames, start=1):
		path = logo_dir / filename
		try:
			data = path.read_bytes()
		except OSError as exc:
			skipped.append(f"Logo listed in manifest not readable, skipped: {filename} ({exc})")
			continue
		logos.append(Logo(id=filename, name=filename, data=data, path=path))
		if verbose and (index % PROGRESS_UPDATE_EVERY == 0 or index == total):
			print_progress("Logos", index, total)
	if verbose and total > 0:
		print()
	for message in skipped:
		print(message)
	if not logos:
		raise ValueError(f"No logo from {manifest_path} could be loaded")
	return logos


#============================================
def index_logos(logos: list[Logo]) -> dict[str, Logo]:
	"""
	Index logos by id.

	Args:
		logos: Logo records.

	Returns:
		Dict keyed by logo id.
	"""
	return {logo.id: logo for logo in logos}
