"""
Manual per-logo scale and wide overrides.
"""

# Standard Library
import dataclasses
import json
import pathlib

# local repo modules
import night_flyer as nf
import night_flyer.config
import night_flyer.logo_lib


normalize_name = nf.logo_lib.normalize_name

TOKEN_OVERLAP_MIN = nf.config.TOKEN_OVERLAP_MIN


@dataclasses.dataclass
class OverrideTable:
	scale: dict[str, float] = dataclasses.field(default_factory=dict)
	wide: dict[str, bool] = dataclasses.field(default_factory=dict)

	def scale_for(self, name: str) -> float | None:
		return lookup_override(name, self.scale)

	def wide_for(self, name: str) -> bool | None:
		return lookup_override(name, self.wide)


#============================================
def normalize_keys(table: dict) -> dict:
	"""
	Normalize the keys of an override mapping.

	Args:
		table: Mapping keyed by raw names.

	Returns:
		Mapping keyed by normalized names, empty keys dropped.
	"""
	normalized = {}
	for key, value in table.items():
		norm_key = normalize_name(str(key))
		if not norm_key:
			continue
		normalized[norm_key] = value
	return normalized


#============================================
def lookup_override(name: str, table: dict):
	"""
	Find the override entry for a logo name.

	Lookup order is exact key, then substring in either direction, then token
	overlap covering at least half of the key tokens.

	Args:
		name: Raw logo name or filename.
		table: Mapping keyed by normalized names.

	Returns:
		Matching value or None.
	"""
	normalized = normalize_name(name)
	if not normalized or not table:
		return None
	if normalized in table:
		return table[normalized]
	for key, value in table.items():
		if key in normalized or normalized in key:
			return value
	name_tokens = set(normalized.split())
	for key, value in table.items():
		key_tokens = key.split()
		if not key_tokens:
			continue
		hits = sum(1 for token in key_tokens if token in name_tokens)
		if hits / len(key_tokens) >= TOKEN_OVERLAP_MIN:
			return value
	return None


#============================================
def default_override_table() -> OverrideTable:
	"""
	Build the override table shipped with the package.

	Returns:
		OverrideTable.
	"""
	return OverrideTable(
		scale=normalize_keys(nf.config.MANUAL_SCALE_OVERRIDES),
		wide=normalize_keys(nf.config.MANUAL_WIDE_OVERRIDES),
	)


#============================================
def load_override_table(path: pathlib.Path) -> OverrideTable:
	"""
	Load override tables from a JSON file.

	The file holds an object with optional "scale" and "wide" mappings.

	Args:
		path: JSON file path.

	Returns:
		OverrideTable.
	"""
	data = json.loads(path.read_text(encoding="utf-8"))
	if not isinstance(data, dict):
		raise ValueError(f"Override file must hold a JSON object: {path}")
	scale_raw = data.get("scale", {})
	wide_raw = data.get("wide", {})
	if not isinstance(scale_raw, dict) or not isinstance(wide_raw, dict):
		raise ValueError(f"Override tables must be JSON objects: {path}")
	scale = {key: float(value) for key, value in scale_raw.items()}
	wide = {key: bool(value) for key, value in wide_raw.items()}
	return OverrideTable(scale=normalize_keys(scale), wide=normalize_keys(wide))
