import night_flyer.rows


#============================================
def _is_wide(name: str) -> bool:
	return name.startswith("w")


#============================================
def test_row_capacities_balance() -> None:
	"""
	Capacities sum to the count and differ by at most one.
	"""
	assert night_flyer.rows.compute_row_capacities(0) == []
	assert night_flyer.rows.compute_row_capacities(1) == [1]
	assert night_flyer.rows.compute_row_capacities(4) == [4]
	assert night_flyer.rows.compute_row_capacities(5) == [3, 2]
	assert night_flyer.rows.compute_row_capacities(7) == [4, 3]
	assert night_flyer.rows.compute_row_capacities(12) == [4, 4, 4]
	assert night_flyer.rows.compute_row_capacities(14) == [5, 5, 4]
	for count in range(1, 30):
		capacities = night_flyer.rows.compute_row_capacities(count)
		assert sum(capacities) == count
		assert len(capacities) <= 3
		assert max(capacities) - min(capacities) <= 1


#============================================
def test_pack_rows_is_total_and_deterministic() -> None:
	"""
	Every logo lands in exactly one row, and repeated runs agree.
	"""
	items = ["n0", "w0", "n1", "w1", "n2", "w2", "n3", "n4", "w3", "n5"]
	first = night_flyer.rows.pack_rows(items, _is_wide)
	second = night_flyer.rows.pack_rows(items, _is_wide)
	assert first == second
	flat = [item for row in first for item in row]
	assert sorted(flat) == sorted(items)
	capacities = night_flyer.rows.compute_row_capacities(len(items))
	assert [len(row) for row in first] == capacities


#============================================
def test_pack_rows_spreads_wide_logos() -> None:
	"""
	Seven logos with three wide ones pack as [4, 3] with wide logos spread.
	"""
	items = ["n0", "w0", "n1", "w1", "n2", "w2", "n3"]
	rows = night_flyer.rows.pack_rows(items, _is_wide)
	assert rows == [["w0", "w2", "n0", "n1"], ["w1", "n2", "n3"]]
	wide_counts = [sum(1 for item in row if _is_wide(item)) for row in rows]
	assert max(wide_counts) - min(wide_counts) <= 1


#============================================
def test_pack_rows_all_wide_overflow() -> None:
	"""
	When every logo is wide the rows still fill to capacity.
	"""
	items = ["w0", "w1", "w2", "w3", "w4"]
	rows = night_flyer.rows.pack_rows(items, _is_wide)
	assert [len(row) for row in rows] == [3, 2]
	assert rows == [["w0", "w2", "w4"], ["w1", "w3"]]


#============================================
def test_interleave_alternates_starting_with_larger_side() -> None:
	"""
	The larger side goes first and wide logos win ties.
	"""
	assert night_flyer.rows.interleave_row(["w0", "w1", "n0", "n1"], _is_wide) == ["w0", "n0", "w1", "n1"]
	assert night_flyer.rows.interleave_row(["w0", "n0", "n1"], _is_wide) == ["n0", "w0", "n1"]
	assert night_flyer.rows.interleave_row(["w0", "w1", "w2", "n0"], _is_wide) == ["w0", "n0", "w1", "w2"]


#============================================
def test_interleave_is_a_permutation() -> None:
	"""
	Interleaving keeps the same multiset and the order within each side.
	"""
	row = ["n0", "w0", "n1", "n2", "w1", "n3"]
	result = night_flyer.rows.interleave_row(row, _is_wide)
	assert sorted(result) == sorted(row)
	assert [item for item in result if _is_wide(item)] == ["w0", "w1"]
	assert [item for item in result if not _is_wide(item)] == ["n0", "n1", "n2", "n3"]


#============================================
def test_interleave_single_kind_unchanged() -> None:
	"""
	Rows of one kind come back in the original order.
	"""
	assert night_flyer.rows.interleave_row(["n2", "n0", "n1"], _is_wide) == ["n2", "n0", "n1"]
	assert night_flyer.rows.interleave_row([], _is_wide) == []


#============================================
def test_build_rows_scenario_b() -> None:
	"""
	Packing then interleaving the seven logo case.
	"""
	items = ["n0", "w0", "n1", "w1", "n2", "w2", "n3"]
	rows = night_flyer.rows.build_rows(items, _is_wide)
	assert rows == [["w0", "n0", "w2", "n1"], ["n2", "w1", "n3"]]
