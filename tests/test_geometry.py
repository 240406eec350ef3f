import itertools
import math

import pytest

import mini_poster.geometry
import recording_surface


geometry = mini_poster.geometry


#============================================
def test_normalize_radius_expands_every_form() -> None:
	"""
	Ensure scalar and 1 to 4 value radii expand clockwise from top-left.
	"""
	assert geometry.normalize_radius(5, 100, 100) == (5, 5, 5, 5)
	assert geometry.normalize_radius([4], 100, 100) == (4, 4, 4, 4)
	assert geometry.normalize_radius([1, 2], 100, 100) == (1, 2, 1, 2)
	assert geometry.normalize_radius([1, 2, 3], 100, 100) == (1, 2, 3, 2)
	assert geometry.normalize_radius([1, 2, 3, 4], 100, 100) == (1, 2, 3, 4)
	assert geometry.normalize_radius(None, 100, 100) == (0, 0, 0, 0)


#============================================
def test_normalize_radius_clamps_to_half_box() -> None:
	"""
	Ensure every corner stays within half the width and height.
	"""
	inputs = [0, 3, 50, [7], [60, 2], [1, 80, 4], [9, 9, 90, 0], [-5, 10]]
	sizes = [(40, 20), (100, 100), (10, 300)]
	for radius, (width, height) in itertools.product(inputs, sizes):
		corners = geometry.normalize_radius(radius, width, height)
		assert len(corners) == 4
		originals = [radius] * 4 if isinstance(radius, int) else None
		for index, corner in enumerate(corners):
			assert corner >= 0.0
			assert corner <= min(width / 2.0, height / 2.0)
			if originals is not None:
				assert corner <= max(0.0, originals[index])
	assert geometry.normalize_radius(100, 40, 20) == (10, 10, 10, 10)


#============================================
def test_normalize_radius_rejects_long_sequences() -> None:
	"""
	Ensure more than four corner values is a configuration error.
	"""
	with pytest.raises(ValueError):
		geometry.normalize_radius([1, 2, 3, 4, 5], 100, 100)


#============================================
def test_rounded_rect_path_visits_edges_then_arcs() -> None:
	"""
	Ensure the rounded path runs clockwise with one arc per corner.
	"""
	commands = geometry.build_rounded_rect_path(10, 20, 100, 50, 10)
	names = [command[0] for command in commands]
	assert names == [
		"move_to", "line_to", "arc", "line_to", "arc",
		"line_to", "arc", "line_to", "arc", "close_path",
	]
	assert commands[0] == ("move_to", 20, 20)
	assert commands[1] == ("line_to", 100, 20)
	top_right = commands[2]
	assert top_right[1:4] == (100, 30, 10)
	assert top_right[4] == pytest.approx(math.pi * 1.5)
	assert top_right[5] == pytest.approx(math.pi * 2.0)
	top_left = commands[8]
	assert top_left[1:4] == (20, 30, 10)


#============================================
def test_zero_radius_path_is_plain_rectangle() -> None:
	"""
	Ensure an all-zero radius produces only straight edges.
	"""
	commands = geometry.build_rounded_rect_path(0, 0, 30, 20, 0)
	assert all(command[0] != "arc" for command in commands)
	points = [command[1:] for command in commands if command[0] in ("move_to", "line_to")]
	assert set(points) == {(0, 0), (30, 0), (30, 20), (0, 20)}


#============================================
def test_trace_path_replays_commands() -> None:
	"""
	Ensure traced commands reach the surface in order.
	"""
	surface = recording_surface.RecordingSurface()
	commands = geometry.build_rounded_rect_path(0, 0, 40, 40, [4, 0])
	geometry.trace_path(surface, commands)
	assert surface.names()[0] == "begin_path"
	assert surface.names()[1:] == [command[0] for command in commands]
	assert len(surface.calls_named("arc")) == 2


#============================================
def test_compute_left_offset() -> None:
	"""
	Ensure alignment offsets for each mode.
	"""
	assert geometry.compute_left_offset(10, "center", None, 30) == 10
	assert geometry.compute_left_offset(10, "left", 100, 30) == 10
	assert geometry.compute_left_offset(10, "center", 100, 30) == 45
	assert geometry.compute_left_offset(10, "right", 100, 30) == 80


#============================================
def test_binary_search_fit_finds_last_fitting_index() -> None:
	"""
	Ensure the search returns the last index before overflow.
	"""
	text = "abcdefghij"
	assert geometry.binary_search_fit(text, lambda end: end >= 4) == 3
	assert geometry.binary_search_fit(text, lambda end: False) == len(text) - 1
	assert geometry.binary_search_fit(text, lambda end: True) == -1
	assert geometry.binary_search_fit("", lambda end: True) == -1


#============================================
def test_binary_search_fit_is_logarithmic_and_repeatable() -> None:
	"""
	Ensure predicate calls stay logarithmic and results repeat.
	"""
	text = "x" * 1000
	calls: list[int] = []

	def overflows(end: int) -> bool:
		calls.append(end)
		return end >= 617

	first = geometry.binary_search_fit(text, overflows)
	first_calls = len(calls)
	second = geometry.binary_search_fit(text, overflows)
	assert first == second == 616
	assert first_calls <= math.ceil(math.log2(len(text) + 1)) + 1


#============================================
def test_object_fit_fill_and_equal_aspect_keep_box() -> None:
	"""
	Ensure fill and matching aspect ratios return the target box.
	"""
	assert geometry.compute_object_fit(200, 100, 5, 5, 80, 80, "fill") == (5, 5, 80, 80)
	assert geometry.compute_object_fit(200, 100, 5, 5, 80, 40, "contain") == (5, 5, 80, 40)
	assert geometry.compute_object_fit(200, 100, 5, 5, 80, 40, "cover") == (5, 5, 80, 40)


#============================================
def test_object_fit_contain_recenters_vertically() -> None:
	"""
	Ensure contain shrinks height for wide images and keeps the center.
	"""
	left, top, width, height = geometry.compute_object_fit(200, 100, 10, 20, 100, 100, "contain")
	assert (left, width) == (10, 100)
	assert height == pytest.approx(50)
	assert top + height / 2.0 == pytest.approx(20 + 100 / 2.0)


#============================================
def test_object_fit_cover_recenters_horizontally() -> None:
	"""
	Ensure cover fills the box and recenters along the width.
	"""
	left, top, width, height = geometry.compute_object_fit(200, 100, 10, 20, 100, 100, "cover")
	assert (top, height) == (20, 100)
	assert width == pytest.approx(200)
	assert left == pytest.approx(-40)
	assert left + width / 2.0 == pytest.approx(10 + 100 / 2.0)


#============================================
def test_object_fit_contain_tall_image() -> None:
	"""
	Ensure contain constrains tall images by height.
	"""
	left, top, width, height = geometry.compute_object_fit(50, 100, 0, 0, 100, 100, "contain")
	assert (top, height) == (0, 100)
	assert width == pytest.approx(50)
	assert left == pytest.approx(25)


#============================================
def test_object_fit_rejects_unknown_mode() -> None:
	"""
	Ensure unknown fit modes raise.
	"""
	with pytest.raises(ValueError):
		geometry.compute_object_fit(10, 10, 0, 0, 20, 30, "scale-down")
