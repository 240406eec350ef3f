"""
Pillow backed raster drawing surface with canvas style state.
"""

# Standard Library
import dataclasses
import io
import math
import re

# PIP3 modules
import PIL.Image
import PIL.ImageChops
import PIL.ImageColor
import PIL.ImageDraw
import PIL.ImageFont

# local repo modules
import mini_poster as mp
import mini_poster.config


DEFAULT_FONT_SIZE = mp.config.DEFAULT_FONT_SIZE
DEFAULT_FONT_FAMILY = mp.config.DEFAULT_FONT_FAMILY
DEFAULT_FONT_WEIGHT = mp.config.DEFAULT_FONT_WEIGHT
DEFAULT_TEXT_BASELINE = mp.config.DEFAULT_TEXT_BASELINE
BOLD_FONT_WEIGHT = mp.config.BOLD_FONT_WEIGHT
FONT_FILE_CANDIDATES = mp.config.FONT_FILE_CANDIDATES
BOLD_FONT_FILE_CANDIDATES = mp.config.BOLD_FONT_FILE_CANDIDATES
ARC_SEGMENT_LENGTH = mp.config.ARC_SEGMENT_LENGTH
MIN_ARC_SEGMENTS = mp.config.MIN_ARC_SEGMENTS

BASELINE_ANCHORS = {
	"alphabetic": "ls",
	"top": "la",
	"hanging": "la",
	"middle": "lm",
	"bottom": "ld",
	"ideographic": "ld",
}

RGBA_FLOAT_PATTERN = re.compile(
	r"^rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*([0-9]*\.?[0-9]+)\s*\)$"
)


@dataclasses.dataclass
class SurfaceState:
	ratio: float = 1.0
	clip_mask: PIL.Image.Image | None = None
	fill_color: str = "#000000"
	font_family: str = DEFAULT_FONT_FAMILY
	font_size: float = DEFAULT_FONT_SIZE
	font_weight: int | str = DEFAULT_FONT_WEIGHT
	text_baseline: str = DEFAULT_TEXT_BASELINE


#============================================
def parse_color(value: str) -> tuple[int, int, int, int]:
	"""
	Parse a CSS style color into RGBA.

	Args:
		value: Color string like "#AABBCC", "red" or "rgba(0, 0, 0, 0.5)".

	Returns:
		Tuple of (r, g, b, a) in 0-255 range.
	"""
	text = value.strip().lower()
	if text == "transparent":
		return (0, 0, 0, 0)
	match = RGBA_FLOAT_PATTERN.match(text)
	# css alpha is 0..1 even when written as an integer
	if match is not None:
		alpha = int(round(float(match.group(4)) * 255.0))
		return (int(match.group(1)), int(match.group(2)), int(match.group(3)), max(0, min(255, alpha)))
	return PIL.ImageColor.getcolor(text, "RGBA")


#============================================
def font_style(weight: int | str | None) -> str:
	"""
	Map a CSS font weight to a face style.

	Args:
		weight: Numeric weight or keyword.

	Returns:
		Either "bold" or "regular".
	"""
	if weight is None:
		return "regular"
	if isinstance(weight, str):
		keyword = weight.strip().lower()
		if keyword in ("bold", "bolder"):
			return "bold"
		if not keyword.isdigit():
			return "regular"
		weight = int(keyword)
	if weight >= BOLD_FONT_WEIGHT:
		return "bold"
	return "regular"


#============================================
def split_font_families(family: str) -> list[str]:
	"""
	Split a CSS font family list into names.

	Args:
		family: Family string like "'Noto Sans', sans-serif".

	Returns:
		List of unquoted family names.
	"""
	names: list[str] = []
	for part in family.split(","):
		name = part.strip().strip("'\"").strip()
		if name:
			names.append(name)
	return names


#============================================
def map_font_candidates(family: str, weight: int | str) -> tuple[str, ...]:
	"""
	Map a family name to font files worth trying.

	Args:
		family: Single family name.
		weight: Font weight.

	Returns:
		Candidate font file names.
	"""
	generic = family.lower()
	if font_style(weight) == "bold" and generic in BOLD_FONT_FILE_CANDIDATES:
		return BOLD_FONT_FILE_CANDIDATES[generic] + FONT_FILE_CANDIDATES[generic]
	if generic in FONT_FILE_CANDIDATES:
		return FONT_FILE_CANDIDATES[generic]
	return (family,)


class RasterSurface:
	"""
	Raster surface with a canvas style drawing interface.

	Coordinates passed in are logical units. scale() sets the pixel ratio,
	and every coordinate, size and font size is multiplied by it before
	reaching Pillow. measure_text() reports logical widths so layout
	and drawing agree.
	"""

	def __init__(self, width: int = 1, height: int = 1) -> None:
		self.fonts: dict[tuple[str, str], bytes] = {}
		self.font_cache: dict[tuple[str, str, float], PIL.ImageFont.FreeTypeFont] = {}
		self.set_size(width, height)

	#============================================
	def set_size(self, width: float, height: float) -> None:
		"""
		Resize the backing image, clearing pixels and state.

		Args:
			width: Width in device pixels.
			height: Height in device pixels.
		"""
		self.width = max(1, int(round(width)))
		self.height = max(1, int(round(height)))
		self.image = PIL.Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
		self.state = SurfaceState()
		self.stack: list[SurfaceState] = []
		self.path: list[list[tuple[float, float]]] = []

	def scale(self, ratio: float) -> None:
		self.state.ratio *= ratio

	def save(self) -> None:
		self.stack.append(dataclasses.replace(self.state))

	def restore(self) -> None:
		if self.stack:
			self.state = self.stack.pop()

	def to_image(self) -> PIL.Image.Image:
		return self.image

	def to_device(self, x: float, y: float) -> tuple[float, float]:
		ratio = self.state.ratio
		return (x * ratio, y * ratio)

	# path construction

	def begin_path(self) -> None:
		self.path = []

	def move_to(self, x: float, y: float) -> None:
		self.path.append([self.to_device(x, y)])

	def line_to(self, x: float, y: float) -> None:
		if not self.path:
			self.move_to(x, y)
			return
		self.path[-1].append(self.to_device(x, y))

	#============================================
	def arc(self, cx: float, cy: float, radius: float, start: float, end: float) -> None:
		"""
		Append a clockwise circular arc as line segments.

		Args:
			cx: Center x.
			cy: Center y.
			radius: Arc radius.
			start: Start angle in radians.
			end: End angle in radians.
		"""
		sweep = end - start
		if sweep < 0:
			sweep += math.pi * 2.0
		device_length = radius * self.state.ratio * sweep
		segments = max(MIN_ARC_SEGMENTS, int(math.ceil(device_length / ARC_SEGMENT_LENGTH)))
		if not self.path:
			self.path.append([])
		subpath = self.path[-1]
		for step in range(segments + 1):
			angle = start + sweep * step / segments
			point_x = cx + radius * math.cos(angle)
			point_y = cy + radius * math.sin(angle)
			subpath.append(self.to_device(point_x, point_y))

	def close_path(self) -> None:
		if self.path and self.path[-1]:
			self.path[-1].append(self.path[-1][0])

	#============================================
	def clip(self) -> None:
		"""
		Intersect the clip region with the current path.
		"""
		mask = PIL.Image.new("L", (self.width, self.height), 0)
		draw = PIL.ImageDraw.Draw(mask)
		for subpath in self.path:
			if len(subpath) >= 3:
				draw.polygon(subpath, fill=255)
		if self.state.clip_mask is not None:
			mask = PIL.ImageChops.multiply(self.state.clip_mask, mask)
		self.state.clip_mask = mask

	# painting

	def set_fill_color(self, color: str) -> None:
		self.state.fill_color = color

	#============================================
	def _composite(self, layer: PIL.Image.Image, left: int, top: int) -> None:
		"""
		Composite an RGBA layer through the clip onto the backing image.

		Args:
			layer: RGBA layer to paint.
			left: Device x of the layer origin.
			top: Device y of the layer origin.
		"""
		right = left + layer.width
		bottom = top + layer.height
		visible_left = max(0, left)
		visible_top = max(0, top)
		visible_right = min(self.width, right)
		visible_bottom = min(self.height, bottom)
		if visible_right <= visible_left or visible_bottom <= visible_top:
			return
		if (visible_left, visible_top, visible_right, visible_bottom) != (left, top, right, bottom):
			layer = layer.crop((
				visible_left - left,
				visible_top - top,
				visible_right - left,
				visible_bottom - top,
			))
		if self.state.clip_mask is not None:
			clip = self.state.clip_mask.crop((visible_left, visible_top, visible_right, visible_bottom))
			layer.putalpha(PIL.ImageChops.multiply(layer.getchannel("A"), clip))
		self.image.alpha_composite(layer, dest=(visible_left, visible_top))

	#============================================
	def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
		"""
		Fill a rectangle with the current fill color.

		Args:
			x: Left edge.
			y: Top edge.
			width: Rectangle width.
			height: Rectangle height.
		"""
		left, top = self.to_device(x, y)
		right, bottom = self.to_device(x + width, y + height)
		box_left = int(round(left))
		box_top = int(round(top))
		box_width = int(round(right)) - box_left
		box_height = int(round(bottom)) - box_top
		if box_width <= 0 or box_height <= 0:
			return
		layer = PIL.Image.new("RGBA", (box_width, box_height), parse_color(self.state.fill_color))
		self._composite(layer, box_left, box_top)

	#============================================
	def draw_image(self, image: PIL.Image.Image, x: float, y: float, width: float, height: float) -> None:
		"""
		Draw an image stretched into a rectangle.

		Args:
			image: Decoded PIL image.
			x: Left edge.
			y: Top edge.
			width: Target width.
			height: Target height.
		"""
		left, top = self.to_device(x, y)
		right, bottom = self.to_device(x + width, y + height)
		box_left = int(round(left))
		box_top = int(round(top))
		box_width = int(round(right)) - box_left
		box_height = int(round(bottom)) - box_top
		if box_width <= 0 or box_height <= 0:
			return
		layer = image.convert("RGBA").resize((box_width, box_height))
		self._composite(layer, box_left, box_top)

	# text

	def register_font(self, family: str, data: bytes, weight: int | str | None = None) -> None:
		style = "any" if weight is None else font_style(weight)
		self.fonts[(family, style)] = data
		self.font_cache.clear()

	def set_font(self, family: str, size: float, weight: int | str = DEFAULT_FONT_WEIGHT) -> None:
		self.state.font_family = family
		self.state.font_size = size
		self.state.font_weight = weight

	def set_text_baseline(self, baseline: str) -> None:
		if baseline not in BASELINE_ANCHORS:
			raise ValueError(f"unknown text baseline: {baseline}")
		self.state.text_baseline = baseline

	#============================================
	def _load_font(self, family: str, weight: int | str, size: float) -> PIL.ImageFont.FreeTypeFont:
		"""
		Resolve a font face for a family, weight and device size.

		Registered faces win, then installed files, then Pillow's
		bundled default face.

		Args:
			family: CSS family list.
			weight: Font weight.
			size: Font size in device pixels.

		Returns:
			Font object.
		"""
		style = font_style(weight)
		key = (family, style, size)
		cached = self.font_cache.get(key)
		if cached is not None:
			return cached
		names = split_font_families(family) or [DEFAULT_FONT_FAMILY]
		font = None
		for name in names:
			for registered_style in (style, "any", "regular", "bold"):
				data = self.fonts.get((name, registered_style))
				if data is not None:
					font = PIL.ImageFont.truetype(io.BytesIO(data), size)
					break
			if font is not None:
				break
			for candidate in map_font_candidates(name, weight):
				try:
					font = PIL.ImageFont.truetype(candidate, size)
				except OSError:
					continue
				break
			if font is not None:
				break
		if font is None:
			font = PIL.ImageFont.load_default(size)
		self.font_cache[key] = font
		return font

	def current_font(self) -> PIL.ImageFont.FreeTypeFont:
		device_size = max(1.0, self.state.font_size * self.state.ratio)
		return self._load_font(self.state.font_family, self.state.font_weight, device_size)

	def measure_text(self, text: str) -> float:
		return self.current_font().getlength(text) / self.state.ratio

	#============================================
	def fill_text(self, text: str, x: float, y: float) -> None:
		"""
		Draw a single line of text anchored at its start.

		Args:
			text: Text to draw.
			x: Start x.
			y: Baseline y for the current baseline mode.
		"""
		if not text:
			return
		font = self.current_font()
		anchor = BASELINE_ANCHORS[self.state.text_baseline]
		device_x, device_y = self.to_device(x, y)
		bbox = font.getbbox(text, anchor=anchor)
		layer_left = int(math.floor(device_x + bbox[0]))
		layer_top = int(math.floor(device_y + bbox[1]))
		layer_width = int(math.ceil(bbox[2] - bbox[0])) + 2
		layer_height = int(math.ceil(bbox[3] - bbox[1])) + 2
		mask = PIL.Image.new("L", (layer_width, layer_height), 0)
		draw = PIL.ImageDraw.Draw(mask)
		draw.text(
			(device_x - layer_left, device_y - layer_top),
			text,
			font=font,
			fill=255,
			anchor=anchor,
		)
		red, green, blue, alpha = parse_color(self.state.fill_color)
		layer = PIL.Image.new("RGBA", mask.size, (red, green, blue, 255))
		if alpha < 255:
			mask = mask.point(lambda value: value * alpha // 255)
		layer.putalpha(mask)
		self._composite(layer, layer_left, layer_top)
