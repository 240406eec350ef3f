"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses


DEFAULT_PIXEL_RATIO = 1.0

DEFAULT_FONT_SIZE = 14.0
LINE_HEIGHT_FACTOR = 1.43
DEFAULT_TEXT_COLOR = "#333333"
DEFAULT_FONT_FAMILY = "sans-serif"
DEFAULT_FONT_WEIGHT = 400
BOLD_FONT_WEIGHT = 700
DEFAULT_TEXT_BASELINE = "alphabetic"
ELLIPSIS = "..."
LINE_THROUGH_OFFSET = 0.64
LINE_THROUGH_THICKNESS = 1.0 / 14.0

TEXT_ALIGNMENTS = ("left", "center", "right")
TEXT_DECORATIONS = ("none", "line-through")
OBJECT_FITS = ("fill", "contain", "cover")
OVERFLOWS = ("visible", "hidden")

# generic CSS families mapped to font files Pillow can usually locate
FONT_FILE_CANDIDATES = {
	"sans-serif": ("DejaVuSans.ttf", "Arial.ttf", "Helvetica.ttc", "LiberationSans-Regular.ttf"),
	"serif": ("DejaVuSerif.ttf", "Times New Roman.ttf", "Times.ttc", "LiberationSerif-Regular.ttf"),
	"monospace": ("DejaVuSansMono.ttf", "Courier New.ttf", "Menlo.ttc", "LiberationMono-Regular.ttf"),
}
BOLD_FONT_FILE_CANDIDATES = {
	"sans-serif": ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "LiberationSans-Bold.ttf"),
	"serif": ("DejaVuSerif-Bold.ttf", "Times New Roman Bold.ttf", "LiberationSerif-Bold.ttf"),
	"monospace": ("DejaVuSansMono-Bold.ttf", "Courier New Bold.ttf", "LiberationMono-Bold.ttf"),
}

ARC_SEGMENT_LENGTH = 2.0
MIN_ARC_SEGMENTS = 4

HTTP_TIMEOUT = 15.0
HTTP_USER_AGENT = "mini-poster/0.1 (python-httpx)"

EXPORT_FILE_TYPES = ("png", "jpg", "pdf")
DEFAULT_EXPORT_FILE_TYPE = "png"
DEFAULT_EXPORT_QUALITY = 1.0
POINTS_PER_PIXEL = 0.75


@dataclasses.dataclass
class RenderOptions:
	width: float | None = None
	height: float | None = None
	pixel_ratio: float = DEFAULT_PIXEL_RATIO


@dataclasses.dataclass
class ExportOptions:
	x: int = 0
	y: int = 0
	width: int | None = None
	height: int | None = None
	dest_width: int | None = None
	dest_height: int | None = None
	file_type: str = DEFAULT_EXPORT_FILE_TYPE
	quality: float = DEFAULT_EXPORT_QUALITY


#============================================
def merge_render_options(
	options: RenderOptions,
	width: float | None,
	height: float | None,
	pixel_ratio: float | None,
) -> RenderOptions:
	"""
	Merge poster level sizing over constructor options.

	Args:
		options: Options given to the renderer.
		width: Poster width, or None to keep the option.
		height: Poster height, or None to keep the option.
		pixel_ratio: Poster pixel ratio, or None to keep the option.

	Returns:
		New RenderOptions.
	"""
	merged = dataclasses.replace(options)
	if width is not None:
		merged.width = width
	if height is not None:
		merged.height = height
	if pixel_ratio is not None:
		merged.pixel_ratio = pixel_ratio
	return merged
