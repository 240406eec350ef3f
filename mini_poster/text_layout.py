"""
Measurement driven line breaking for text nodes.
"""

# Standard Library
from typing import Callable

# local repo modules
import mini_poster as mp
import mini_poster.config
import mini_poster.geometry


ELLIPSIS = mp.config.ELLIPSIS

binary_search_fit = mp.geometry.binary_search_fit


#============================================
def layout_lines(
	content: str,
	available_width: float | None,
	measure: Callable[[str], float],
	line_clamp: int | None = None,
) -> list[str]:
	"""
	Break content into lines that fit the available width.

	Each line takes the longest run from the cursor that still fits. A
	single character wider than the box is placed on its own line so the
	loop always advances. When the last permitted line leaves content
	behind, one character is dropped and an ellipsis appended.

	Args:
		content: Text to lay out.
		available_width: Box width, or None for a single unwrapped line.
		measure: Returns the rendered width of a string.
		line_clamp: Maximum line count, 0 or None for unlimited.

	Returns:
		Ordered list of line strings.
	"""
	if available_width is None:
		return [content]
	max_lines = line_clamp if line_clamp else None

	lines: list[str] = []
	index = 0
	while index < len(content):
		if max_lines is not None and len(lines) >= max_lines:
			break
		start = index

		def overflows(end: int) -> bool:
			return measure(content[start:end + 1]) > available_width

		index = binary_search_fit(content, overflows) + 1
		if index <= start:
			index = start + 1

		if max_lines is not None and len(lines) + 1 == max_lines and index < len(content):
			lines.append(content[start:index - 1] + ELLIPSIS)
		else:
			lines.append(content[start:index])
	return lines
