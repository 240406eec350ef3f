"""
Pure geometry helpers for paths, alignment and placement.
"""

# Standard Library
import math
from typing import Callable, Sequence


Radius = float | Sequence[float]
PathCommand = tuple
CornerRadii = tuple[float, float, float, float]


#============================================
def normalize_radius(radius: Radius | None, width: float, height: float) -> CornerRadii:
	"""
	Expand a border radius to four clamped corner values.

	Corners run clockwise from the top left: (top_left, top_right,
	bottom_right, bottom_left). Each corner is clamped to half the box
	width and half the box height so adjacent arcs never overlap.

	Args:
		radius: Single number or sequence of 1 to 4 numbers.
		width: Box width.
		height: Box height.

	Returns:
		Tuple of four corner radii.
	"""
	if radius is None:
		radius = 0.0
	if isinstance(radius, (int, float)):
		corners = (radius, radius, radius, radius)
	else:
		values = tuple(radius)
		if len(values) == 1:
			corners = (values[0], values[0], values[0], values[0])
		elif len(values) == 2:
			corners = (values[0], values[1], values[0], values[1])
		elif len(values) == 3:
			corners = (values[0], values[1], values[2], values[1])
		elif len(values) == 4:
			corners = values
		else:
			raise ValueError(f"border radius needs 1 to 4 values, got {len(values)}")
	limit = max(0.0, min(width / 2.0, height / 2.0))
	clamped = tuple(max(0.0, min(float(value), limit)) for value in corners)
	return clamped


#============================================
def build_rounded_rect_path(
	x: float,
	y: float,
	width: float,
	height: float,
	radius: Radius | None,
) -> list[PathCommand]:
	"""
	Build a closed rounded rectangle path.

	Edges and arcs are visited clockwise starting on the top edge. Arcs
	use canvas conventions: angles in radians, clockwise, measured from
	the positive x axis. Corners with a zero radius are emitted as plain
	vertices, so an all-zero radius yields a plain rectangle.

	Args:
		x: Left edge.
		y: Top edge.
		width: Box width.
		height: Box height.
		radius: Border radius in any accepted form.

	Returns:
		List of path commands.
	"""
	top_left, top_right, bottom_right, bottom_left = normalize_radius(radius, width, height)
	right = x + width
	bottom = y + height
	commands: list[PathCommand] = [("move_to", x + top_left, y)]
	commands.append(("line_to", right - top_right, y))
	if top_right > 0:
		commands.append(("arc", right - top_right, y + top_right, top_right, math.pi * 1.5, math.pi * 2.0))
	commands.append(("line_to", right, bottom - bottom_right))
	if bottom_right > 0:
		commands.append(("arc", right - bottom_right, bottom - bottom_right, bottom_right, 0.0, math.pi * 0.5))
	commands.append(("line_to", x + bottom_left, bottom))
	if bottom_left > 0:
		commands.append(("arc", x + bottom_left, bottom - bottom_left, bottom_left, math.pi * 0.5, math.pi))
	commands.append(("line_to", x, y + top_left))
	if top_left > 0:
		commands.append(("arc", x + top_left, y + top_left, top_left, math.pi, math.pi * 1.5))
	commands.append(("close_path",))
	return commands


#============================================
def trace_path(surface, commands: list[PathCommand]) -> None:
	"""
	Replay path commands onto a drawing surface as a new path.

	Args:
		surface: Drawing surface with canvas style path methods.
		commands: Commands from build_rounded_rect_path.
	"""
	surface.begin_path()
	for command in commands:
		name = command[0]
		args = command[1:]
		if name == "move_to":
			surface.move_to(*args)
		elif name == "line_to":
			surface.line_to(*args)
		elif name == "arc":
			surface.arc(*args)
		elif name == "close_path":
			surface.close_path()
		else:
			raise ValueError(f"unknown path command: {name}")


#============================================
def compute_left_offset(
	left: float,
	text_align: str,
	width: float | None,
	text_width: float | None = None,
) -> float:
	"""
	Compute the x position of a text run inside its box.

	Args:
		left: Box left edge.
		text_align: One of left, center, right.
		width: Box width, or None when the text has no box.
		text_width: Measured run width.

	Returns:
		X position for the start of the run.
	"""
	if width is None:
		return left
	measured = text_width or 0.0
	if text_align == "center":
		return left + (width - measured) / 2.0
	if text_align == "right":
		return left + width - measured
	return left


#============================================
def binary_search_fit(text: str, overflows: Callable[[int], bool]) -> int:
	"""
	Find the last index whose prefix does not overflow.

	The predicate receives an inclusive end index and must be monotonic:
	once a prefix overflows every longer prefix overflows too.

	Args:
		text: Text being searched.
		overflows: Predicate for an inclusive end index.

	Returns:
		Largest non-overflowing index, or -1 when index 0 overflows.
	"""
	low = 0
	high = len(text)
	while low < high:
		mid = (low + high) >> 1
		if overflows(mid):
			high = mid
		else:
			low = mid + 1
	return high - 1


#============================================
def compute_object_fit(
	image_width: float,
	image_height: float,
	left: float,
	top: float,
	width: float,
	height: float,
	object_fit: str,
) -> tuple[float, float, float, float]:
	"""
	Compute the draw rectangle for an image inside a target box.

	Args:
		image_width: Intrinsic image width.
		image_height: Intrinsic image height.
		left: Box left edge.
		top: Box top edge.
		width: Box width.
		height: Box height.
		object_fit: One of fill, contain, cover.

	Returns:
		Tuple of (left, top, width, height).
	"""
	if object_fit not in ("fill", "contain", "cover"):
		raise ValueError(f"unknown object fit: {object_fit}")
	image_aspect = image_width / image_height
	area_aspect = width / height
	if object_fit == "fill" or image_aspect == area_aspect:
		return (left, top, width, height)

	if object_fit == "contain":
		constrain_by_width = image_aspect > area_aspect
	else:
		constrain_by_width = image_aspect < area_aspect

	if constrain_by_width:
		fitted_height = image_height / (image_width / width)
		return (left, top + (height - fitted_height) / 2.0, width, fitted_height)
	fitted_width = image_width / (image_height / height)
	return (left + (width - fitted_width) / 2.0, top, fitted_width, height)
