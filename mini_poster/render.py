"""
Rendering of scene trees onto a drawing surface.
"""

# Standard Library
import asyncio
import contextlib
import dataclasses
import pathlib

# local repo modules
import mini_poster as mp
import mini_poster.assets
import mini_poster.config
import mini_poster.export
import mini_poster.geometry
import mini_poster.loaders
import mini_poster.scene
import mini_poster.text_layout


AssetCache = mp.assets.AssetCache
RenderOptions = mp.config.RenderOptions
ExportOptions = mp.config.ExportOptions
ContainerNode = mp.scene.ContainerNode
ImageNode = mp.scene.ImageNode
TextNode = mp.scene.TextNode

LINE_THROUGH_OFFSET = mp.config.LINE_THROUGH_OFFSET
LINE_THROUGH_THICKNESS = mp.config.LINE_THROUGH_THICKNESS
DEFAULT_TEXT_BASELINE = mp.config.DEFAULT_TEXT_BASELINE

build_rounded_rect_path = mp.geometry.build_rounded_rect_path
trace_path = mp.geometry.trace_path
compute_left_offset = mp.geometry.compute_left_offset
compute_object_fit = mp.geometry.compute_object_fit
layout_lines = mp.text_layout.layout_lines
normalize_node = mp.scene.normalize_node
parse_node = mp.scene.parse_node
parse_poster = mp.scene.parse_poster


@dataclasses.dataclass
class DrawResult:
	kind: str
	status: str
	reason: str = ""

	@property
	def skipped(self) -> bool:
		return self.status == "skipped"


#============================================
@contextlib.contextmanager
def saved_state(surface):
	"""
	Save surface state and restore it on every exit path.

	Args:
		surface: Drawing surface.
	"""
	surface.save()
	try:
		yield surface
	finally:
		surface.restore()


#============================================
def summarize_results(results: list[DrawResult]) -> tuple[int, int]:
	"""
	Count drawn and skipped nodes.

	Args:
		results: Draw results.

	Returns:
		Tuple of (drawn_count, skipped_count).
	"""
	skipped = sum(1 for result in results if result.skipped)
	return (len(results) - skipped, skipped)


class Poster:
	"""
	Renders poster scenes onto one surface and owns its asset cache.

	Assets loaded by one render stay cached for later renders on the
	same instance, failed loads included, until clear_assets() is called.
	"""

	def __init__(
		self,
		surface,
		options: RenderOptions | None = None,
		image_loader=None,
		font_loader=None,
		verbose: bool = False,
	) -> None:
		self.surface = surface
		self.options = options if options is not None else RenderOptions()
		self.assets = AssetCache()
		self.sizes: dict[str, dict[str, float]] = {}
		self.image_loader = image_loader if image_loader is not None else mp.loaders.load_image
		self.font_loader = font_loader if font_loader is not None else self.register_font
		self.verbose = verbose

	async def register_font(self, family: str, source: str) -> str:
		return await mp.loaders.load_font_face(self.surface, family, source)

	#============================================
	async def render(self, config) -> list[DrawResult]:
		"""
		Size the surface and draw a whole poster.

		Args:
			config: Poster dict or PosterConfig.

		Returns:
			Draw results in draw order.
		"""
		poster = parse_poster(config)
		options = mp.config.merge_render_options(
			self.options,
			poster.width,
			poster.height,
			poster.pixel_ratio,
		)
		if not options.width or not options.height:
			raise ValueError("poster render needs both width and height")
		pixel_ratio = options.pixel_ratio or 1.0

		self.surface.set_size(options.width * pixel_ratio, options.height * pixel_ratio)
		self.surface.scale(pixel_ratio)

		root = ContainerNode(
			left=0.0,
			top=0.0,
			width=float(options.width),
			height=float(options.height),
			background_color=poster.background_color,
			border_radius=poster.border_radius,
			overflow=poster.overflow,
			children=poster.children,
		)
		return await self.render_container(root)

	#============================================
	async def draw(self, data) -> list[DrawResult]:
		"""
		Draw one node or a list of nodes outside a full render.

		Failures never escape; they come back as skipped results.

		Args:
			data: Node, node dict, or a list of either.

		Returns:
			Draw results in draw order.
		"""
		if isinstance(data, (list, tuple)):
			results: list[DrawResult] = []
			for item in data:
				results.extend(await self.draw(item))
			return results
		try:
			node = parse_node(data)
		except ValueError as error:
			kind = data.get("type", "unknown") if isinstance(data, dict) else "unknown"
			return [self.skip(kind, error)]
		return await self.draw_node(node, 0.0, 0.0)

	#============================================
	async def draw_node(self, node, parent_left: float, parent_top: float) -> list[DrawResult]:
		"""
		Normalize and draw a single node, isolating its failures.

		Args:
			node: Scene node with local coordinates.
			parent_left: Absolute left of the parent.
			parent_top: Absolute top of the parent.

		Returns:
			Draw results for the node and any descendants.
		"""
		kind = getattr(node, "kind", type(node).__name__)
		try:
			normalized = normalize_node(node, parent_left, parent_top)
			if isinstance(normalized, ContainerNode):
				return await self.render_container(normalized)
			if isinstance(normalized, ImageNode):
				await self.render_image(normalized)
			elif isinstance(normalized, TextNode):
				await self.render_text(normalized)
			else:
				raise TypeError(f"not a scene node: {type(node).__name__}")
		except Exception as error:
			return [self.skip(kind, error)]
		return [DrawResult(kind=kind, status="drawn")]

	def skip(self, kind: str, error: Exception) -> DrawResult:
		reason = f"{type(error).__name__}: {error}"
		if self.verbose:
			print(f"Skipped {kind} node: {reason}")
		return DrawResult(kind=kind, status="skipped", reason=reason)

	#============================================
	def clip_box(
		self,
		left: float,
		top: float,
		width: float,
		height: float,
		border_radius,
		background_color: str | None,
	) -> None:
		"""
		Clip to a rounded box and paint its background.

		Args:
			left: Absolute left.
			top: Absolute top.
			width: Box width.
			height: Box height.
			border_radius: Radius in any accepted form.
			background_color: Optional fill color.
		"""
		surface = self.surface
		trace_path(surface, build_rounded_rect_path(left, top, width, height, border_radius))
		surface.clip()
		if background_color:
			surface.set_fill_color(background_color)
			surface.fill_rect(left, top, width, height)

	#============================================
	def load_assets(self, children: list) -> None:
		"""
		Start asset loads for every direct child before any is drawn.

		Args:
			children: Child scene nodes.
		"""
		for child in children:
			if isinstance(child, ImageNode):
				self.request_image(child.src)
			elif isinstance(child, TextNode) and child.font_family and child.font_src:
				self.request_font(child.font_family, child.font_src)

	def request_image(self, src: str) -> None:
		self.assets.request("image", src, lambda: self.image_loader(src))

	def request_font(self, family: str, src: str) -> None:
		self.assets.request("font", src, lambda: self.font_loader(family, src))

	#============================================
	async def render_container(self, node: ContainerNode) -> list[DrawResult]:
		"""
		Draw a container background and its children.

		With overflow hidden the children stay inside the container clip,
		otherwise the clip is released before they draw.

		Args:
			node: Normalized container node.

		Returns:
			Draw results for the container and its descendants.
		"""
		results = [DrawResult(kind="container", status="drawn")]
		children = [parse_node(child) for child in node.children]
		hidden = node.overflow == "hidden"
		with saved_state(self.surface):
			self.clip_box(
				node.left,
				node.top,
				node.width,
				node.height,
				node.border_radius,
				node.background_color,
			)
			if hidden:
				results.extend(await self.render_children(node, children))
		if not hidden:
			results.extend(await self.render_children(node, children))
		return results

	async def render_children(self, node: ContainerNode, children: list) -> list[DrawResult]:
		results: list[DrawResult] = []
		self.load_assets(children)
		for child in children:
			results.extend(await self.draw_node(child, node.left, node.top))
		return results

	#============================================
	async def render_image(self, node: ImageNode) -> None:
		"""
		Wait for an image and draw it with its fit mode.

		Args:
			node: Normalized image node.
		"""
		self.request_image(node.src)
		image = await self.assets.wait_ready("image", node.src)
		with saved_state(self.surface):
			self.clip_box(
				node.left,
				node.top,
				node.width,
				node.height,
				node.border_radius,
				node.background_color,
			)
			left, top, width, height = compute_object_fit(
				image.width,
				image.height,
				node.left,
				node.top,
				node.width,
				node.height,
				node.object_fit,
			)
			self.surface.draw_image(image, left, top, width, height)

	#============================================
	async def render_text(self, node: TextNode) -> None:
		"""
		Lay out and draw a text node.

		Args:
			node: Normalized text node.
		"""
		if node.font_family and node.font_src:
			self.request_font(node.font_family, node.font_src)
			await self.assets.wait_ready("font", node.font_src)

		surface = self.surface
		font_size = node.font_size
		line_height = node.resolved_line_height
		with saved_state(surface):
			surface.set_text_baseline(DEFAULT_TEXT_BASELINE)
			surface.set_fill_color(node.color)
			surface.set_font(node.font_family, font_size, node.font_weight)

			lines = layout_lines(node.content, node.width, surface.measure_text, node.line_clamp)
			for index, line in enumerate(lines):
				top_offset = node.top + (line_height - font_size) / 2.0 + line_height * index
				text_width = surface.measure_text(line)
				line_left = compute_left_offset(node.left, node.text_align, node.width, text_width)
				surface.fill_text(line, line_left, top_offset + font_size)
				if node.text_decoration == "line-through":
					surface.fill_rect(
						line_left,
						top_offset + font_size * LINE_THROUGH_OFFSET,
						text_width,
						font_size * LINE_THROUGH_THICKNESS,
					)

			if node.id:
				width = node.width if node.width is not None else surface.measure_text(node.content)
				self.sizes[node.id] = {"width": width, "height": line_height * len(lines)}

	def get_size(self, node_id: str) -> dict[str, float] | None:
		return self.sizes.get(node_id)

	def clear_assets(self) -> None:
		self.assets.clear()

	#============================================
	async def export(
		self,
		options: ExportOptions | None = None,
		output_path: pathlib.Path | None = None,
	) -> pathlib.Path:
		"""
		Export the surface through the export backend.

		Args:
			options: Export options.
			output_path: Target path, or None for a temporary file.

		Returns:
			Path of the written file.
		"""
		return await asyncio.to_thread(mp.export.export_surface, self.surface, options, output_path)
