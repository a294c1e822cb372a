"""
Row packing and wide/narrow interleaving for Day Box logos.
"""

# Standard Library
import math
import typing

# local repo modules
import night_flyer as nf
import night_flyer.config


MAX_ROWS = nf.config.MAX_ROWS
LOGOS_PER_ROW_TARGET = nf.config.LOGOS_PER_ROW_TARGET

T = typing.TypeVar("T")


#============================================
def compute_row_capacities(count: int, max_rows: int = MAX_ROWS) -> list[int]:
	"""
	Split a logo count into balanced row capacities.

	Args:
		count: Number of logos.
		max_rows: Maximum number of rows.

	Returns:
		Capacities that differ by at most one and sum to count.
	"""
	if count <= 0:
		return []
	row_count = min(max_rows, max(1, math.ceil(count / LOGOS_PER_ROW_TARGET)))
	base, remainder = divmod(count, row_count)
	return [base + 1 if index < remainder else base for index in range(row_count)]


#============================================
def pack_rows(
	items: typing.Sequence[T],
	is_wide: typing.Callable[[T], bool],
	max_rows: int = MAX_ROWS,
) -> list[list[T]]:
	"""
	Assign logos to rows, spreading wide logos evenly.

	Wide logos go first, each to the row with the fewest wide logos that still
	has room (ties go to the row with more free slots, then the earlier row).
	Remaining slots fill in row order from the narrow logos followed by any
	wide logos left over.

	Args:
		items: Logos in display order.
		is_wide: Classifier for a logo.
		max_rows: Maximum number of rows.

	Returns:
		List of rows.
	"""
	capacities = compute_row_capacities(len(items), max_rows)
	if not capacities:
		return []
	rows: list[list[T]] = [[] for _ in capacities]
	wide_counts = [0 for _ in capacities]
	wide_items = [item for item in items if is_wide(item)]
	narrow_items = [item for item in items if not is_wide(item)]

	placed_wide = 0
	for item in wide_items:
		candidates = [
			index for index, capacity in enumerate(capacities)
			if len(rows[index]) < capacity
		]
		if not candidates:
			break
		target = min(
			candidates,
			key=lambda index: (wide_counts[index], -(capacities[index] - len(rows[index])), index),
		)
		rows[target].append(item)
		wide_counts[target] += 1
		placed_wide += 1

	leftovers = narrow_items + wide_items[placed_wide:]
	cursor = 0
	for index, capacity in enumerate(capacities):
		free = capacity - len(rows[index])
		if free <= 0:
			continue
		rows[index].extend(leftovers[cursor:cursor + free])
		cursor += free
	return rows


#============================================
def interleave_row(row: typing.Sequence[T], is_wide: typing.Callable[[T], bool]) -> list[T]:
	"""
	Alternate wide and narrow logos inside one row.

	Starts with whichever side has more logos (wide on ties) and skips a side
	once it runs out. Order within each side is preserved.

	Args:
		row: Logos of one packed row.
		is_wide: Classifier for a logo.

	Returns:
		Reordered row.
	"""
	wide_items = [item for item in row if is_wide(item)]
	narrow_items = [item for item in row if not is_wide(item)]
	if not wide_items or not narrow_items:
		return list(row)
	result: list[T] = []
	wide_index = 0
	narrow_index = 0
	take_wide = len(wide_items) >= len(narrow_items)
	while wide_index < len(wide_items) or narrow_index < len(narrow_items):
		if take_wide and wide_index < len(wide_items):
			result.append(wide_items[wide_index])
			wide_index += 1
		elif not take_wide and narrow_index < len(narrow_items):
			result.append(narrow_items[narrow_index])
			narrow_index += 1
		take_wide = not take_wide
	return result


#============================================
def build_rows(
	items: typing.Sequence[T],
	is_wide: typing.Callable[[T], bool],
	max_rows: int = MAX_ROWS,
) -> list[list[T]]:
	"""
	Pack logos into rows and interleave each row.

	Args:
		items: Logos in display order.
		is_wide: Classifier for a logo.
		max_rows: Maximum number of rows.

	Returns:
		Rows ready for placement.
	"""
	return [interleave_row(row, is_wide) for row in pack_rows(items, is_wide, max_rows)]
