"""
Scene model, parsing and coordinate normalization.
"""

# Standard Library
import dataclasses
import json
import pathlib
from typing import Callable

# local repo modules
import mini_poster as mp
import mini_poster.config
import mini_poster.geometry


Radius = mp.geometry.Radius

DEFAULT_FONT_SIZE = mp.config.DEFAULT_FONT_SIZE
LINE_HEIGHT_FACTOR = mp.config.LINE_HEIGHT_FACTOR
DEFAULT_TEXT_COLOR = mp.config.DEFAULT_TEXT_COLOR
DEFAULT_FONT_FAMILY = mp.config.DEFAULT_FONT_FAMILY
DEFAULT_FONT_WEIGHT = mp.config.DEFAULT_FONT_WEIGHT
TEXT_ALIGNMENTS = mp.config.TEXT_ALIGNMENTS
TEXT_DECORATIONS = mp.config.TEXT_DECORATIONS
OBJECT_FITS = mp.config.OBJECT_FITS
OVERFLOWS = mp.config.OVERFLOWS


@dataclasses.dataclass(frozen=True)
class Deferred:
	"""
	A coordinate computed on demand by a zero-argument producer.
	"""
	producer: Callable[[], float]

	def resolve(self) -> float:
		return float(self.producer())


Coordinate = float | Deferred


@dataclasses.dataclass
class ContainerNode:
	left: Coordinate
	top: Coordinate
	width: float
	height: float
	background_color: str | None = None
	border_radius: Radius = 0
	overflow: str = "visible"
	children: list = dataclasses.field(default_factory=list)
	kind: str = dataclasses.field(default="container", init=False)


@dataclasses.dataclass
class ImageNode:
	left: Coordinate
	top: Coordinate
	width: float
	height: float
	src: str
	background_color: str | None = None
	border_radius: Radius = 0
	object_fit: str = "fill"
	kind: str = dataclasses.field(default="image", init=False)


@dataclasses.dataclass
class TextNode:
	left: Coordinate
	top: Coordinate
	content: str
	width: float | None = None
	height: float | None = None
	color: str = DEFAULT_TEXT_COLOR
	font_size: float = DEFAULT_FONT_SIZE
	line_height: float | None = None
	font_family: str = DEFAULT_FONT_FAMILY
	font_src: str | None = None
	font_weight: int | str = DEFAULT_FONT_WEIGHT
	text_align: str = "left"
	text_decoration: str = "none"
	line_clamp: int | None = None
	id: str | None = None
	kind: str = dataclasses.field(default="text", init=False)

	@property
	def resolved_line_height(self) -> float:
		if self.line_height is None:
			return self.font_size * LINE_HEIGHT_FACTOR
		return self.line_height


SceneNode = ContainerNode | ImageNode | TextNode


@dataclasses.dataclass
class PosterConfig:
	width: float | None
	height: float | None
	pixel_ratio: float | None = None
	background_color: str | None = None
	border_radius: Radius = 0
	overflow: str = "visible"
	children: list = dataclasses.field(default_factory=list)


#============================================
def parse_coordinate(value) -> Coordinate:
	"""
	Parse a left or top value.

	Args:
		value: Number, callable producer, Deferred or None.

	Returns:
		Float or Deferred.
	"""
	if value is None:
		return 0.0
	if isinstance(value, Deferred):
		return value
	if callable(value):
		return Deferred(value)
	return float(value)


#============================================
def require_choice(value: str, choices: tuple[str, ...], field_name: str) -> str:
	"""
	Validate an enumerated style value.

	Args:
		value: Value to check.
		choices: Allowed values.
		field_name: Name used in the error message.

	Returns:
		The value unchanged.
	"""
	if value not in choices:
		raise ValueError(f"invalid {field_name}: {value!r} (expected one of {', '.join(choices)})")
	return value


#============================================
def require_radius(value) -> Radius:
	"""
	Validate a border radius of one number or 1 to 4 numbers.

	Args:
		value: Radius as given in the node dict.

	Returns:
		The value unchanged, or 0 when missing.
	"""
	if value is None:
		return 0
	if isinstance(value, (int, float)):
		return value
	if isinstance(value, (list, tuple)) and 1 <= len(value) <= 4:
		if all(isinstance(item, (int, float)) for item in value):
			return value
	raise ValueError(f"invalid borderRadius: {value!r} (expected a number or 1 to 4 numbers)")


#============================================
def require_field(data: dict, key: str, node_type: str):
	"""
	Fetch a required key from a node dict.

	Args:
		data: Node dict.
		key: Required key.
		node_type: Node type for the error message.

	Returns:
		The stored value.
	"""
	value = data.get(key)
	if value is None:
		raise ValueError(f"{node_type} node is missing {key}")
	return value


#============================================
def parse_children(items: list | None) -> list[SceneNode]:
	"""
	Parse a list of child dicts or nodes.

	Args:
		items: Child entries.

	Returns:
		List of scene nodes.
	"""
	if not items:
		return []
	return [parse_node(item) for item in items]


#============================================
def parse_node(data) -> SceneNode:
	"""
	Convert a camelCase node dict into a scene node.

	Nodes that are already dataclasses pass through untouched.

	Args:
		data: Node dict with a type key, or a scene node.

	Returns:
		ContainerNode, ImageNode or TextNode.
	"""
	if isinstance(data, (ContainerNode, ImageNode, TextNode)):
		return data
	if not isinstance(data, dict):
		raise ValueError(f"scene node must be a dict, got {type(data).__name__}")
	node_type = data.get("type")
	left = parse_coordinate(data.get("left"))
	top = parse_coordinate(data.get("top"))

	if node_type == "container":
		return ContainerNode(
			left=left,
			top=top,
			width=float(require_field(data, "width", node_type)),
			height=float(require_field(data, "height", node_type)),
			background_color=data.get("backgroundColor"),
			border_radius=require_radius(data.get("borderRadius", 0)),
			overflow=require_choice(data.get("overflow", "visible"), OVERFLOWS, "overflow"),
			children=parse_children(data.get("children")),
		)
	if node_type == "image":
		return ImageNode(
			left=left,
			top=top,
			width=float(require_field(data, "width", node_type)),
			height=float(require_field(data, "height", node_type)),
			src=str(require_field(data, "src", node_type)),
			background_color=data.get("backgroundColor"),
			border_radius=require_radius(data.get("borderRadius", 0)),
			object_fit=require_choice(data.get("objectFit", "fill"), OBJECT_FITS, "objectFit"),
		)
	if node_type == "text":
		width = data.get("width")
		height = data.get("height")
		line_clamp = data.get("lineClamp")
		line_height = data.get("lineHeight")
		return TextNode(
			left=left,
			top=top,
			content=str(data.get("content", "")),
			width=float(width) if width else None,
			height=float(height) if height is not None else None,
			color=data.get("color", DEFAULT_TEXT_COLOR),
			font_size=float(data.get("fontSize", DEFAULT_FONT_SIZE)),
			line_height=float(line_height) if line_height is not None else None,
			font_family=data.get("fontFamily", DEFAULT_FONT_FAMILY),
			font_src=data.get("fontSrc"),
			font_weight=data.get("fontWeight", DEFAULT_FONT_WEIGHT),
			text_align=require_choice(data.get("textAlign", "left"), TEXT_ALIGNMENTS, "textAlign"),
			text_decoration=require_choice(
				data.get("textDecoration", "none"),
				TEXT_DECORATIONS,
				"textDecoration",
			),
			line_clamp=int(line_clamp) if line_clamp else None,
			id=data.get("id"),
		)
	raise ValueError(f"unknown node type: {node_type!r}")


#============================================
def parse_poster(data) -> PosterConfig:
	"""
	Convert a top-level poster dict into a PosterConfig.

	Args:
		data: Poster dict or an existing PosterConfig.

	Returns:
		PosterConfig.
	"""
	if isinstance(data, PosterConfig):
		return data
	return PosterConfig(
		width=data.get("width"),
		height=data.get("height"),
		pixel_ratio=data.get("pixelRatio"),
		background_color=data.get("backgroundColor"),
		border_radius=require_radius(data.get("borderRadius", 0)),
		overflow=require_choice(data.get("overflow", "visible"), OVERFLOWS, "overflow"),
		children=parse_children(data.get("children")),
	)


#============================================
def load_scene_file(path: pathlib.Path) -> PosterConfig:
	"""
	Load a poster description from a JSON file.

	Args:
		path: JSON file path.

	Returns:
		PosterConfig.
	"""
	with path.open("r", encoding="utf-8") as handle:
		data = json.load(handle)
	return parse_poster(data)


#============================================
def resolve_coordinate(value: Coordinate) -> float:
	"""
	Resolve a literal or deferred coordinate.

	Args:
		value: Float or Deferred.

	Returns:
		Float coordinate.
	"""
	if isinstance(value, Deferred):
		return value.resolve()
	return float(value)


#============================================
def normalize_node(node: SceneNode, parent_left: float = 0.0, parent_top: float = 0.0) -> SceneNode:
	"""
	Resolve a node position into the root coordinate space.

	Only the node itself is resolved. Children are normalized by the
	renderer against this node's absolute offset when they are drawn.

	Args:
		node: Scene node with local coordinates.
		parent_left: Absolute left of the parent.
		parent_top: Absolute top of the parent.

	Returns:
		Copy of the node with absolute left and top.
	"""
	left = parent_left + resolve_coordinate(node.left)
	top = parent_top + resolve_coordinate(node.top)
	return dataclasses.replace(node, left=left, top=top)

