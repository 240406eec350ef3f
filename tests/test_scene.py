import asyncio
import json
import pathlib

import pytest

import mini_poster.render
import mini_poster.scene
import recording_surface


scene = mini_poster.scene


#============================================
def test_parse_node_maps_camel_case_keys() -> None:
	"""
	Ensure dict input becomes typed nodes with defaults applied.
	"""
	node = scene.parse_node({
		"type": "container",
		"left": 5,
		"top": 6,
		"width": 100,
		"height": 80,
		"backgroundColor": "#ffffff",
		"borderRadius": [4, 8],
		"overflow": "hidden",
		"children": [
			{"type": "image", "left": 1, "top": 2, "width": 30, "height": 20, "src": "a.png", "objectFit": "cover"},
			{"type": "text", "content": "Hi", "fontSize": 20, "lineClamp": 2, "id": "greeting"},
		],
	})
	assert isinstance(node, scene.ContainerNode)
	assert node.kind == "container"
	assert (node.left, node.top, node.overflow) == (5.0, 6.0, "hidden")
	assert node.border_radius == [4, 8]
	image, text = node.children
	assert isinstance(image, scene.ImageNode)
	assert image.object_fit == "cover"
	assert isinstance(text, scene.TextNode)
	assert (text.left, text.top) == (0.0, 0.0)
	assert text.width is None
	assert text.line_clamp == 2
	assert text.id == "greeting"
	assert text.resolved_line_height == pytest.approx(20 * 1.43)
	assert text.color == "#333333"


#============================================
def test_parse_node_rejects_bad_input() -> None:
	"""
	Ensure configuration errors surface as ValueError.
	"""
	with pytest.raises(ValueError):
		scene.parse_node({"type": "video", "width": 10, "height": 10})
	with pytest.raises(ValueError):
		scene.parse_node({"type": "image", "width": 10, "height": 10})
	with pytest.raises(ValueError):
		scene.parse_node({"type": "image", "width": 10, "height": 10, "src": "a.png", "objectFit": "zoom"})
	with pytest.raises(ValueError):
		scene.parse_node({"type": "text", "content": "x", "textAlign": "justify"})
	with pytest.raises(ValueError):
		scene.parse_node({"type": "container", "width": 10, "height": 10, "borderRadius": [1, 2, 3, 4, 5]})
	with pytest.raises(ValueError):
		scene.parse_node({"type": "image", "width": 10, "height": 10, "src": "a.png", "borderRadius": []})
	with pytest.raises(ValueError):
		scene.parse_poster({"width": 10, "height": 10, "borderRadius": "round"})


#============================================
def test_bad_child_radius_fails_the_render() -> None:
	"""
	Ensure a nested radius error is fatal instead of a skipped node.
	"""
	surface = recording_surface.RecordingSurface()
	poster = mini_poster.render.Poster(surface)
	config = {
		"width": 100,
		"height": 100,
		"children": [{"type": "container", "width": 10, "height": 10, "borderRadius": [1, 2, 3, 4, 5]}],
	}
	with pytest.raises(ValueError):
		asyncio.run(poster.render(config))
	assert surface.calls == []


#============================================
def test_child_offset_composes_with_parent() -> None:
	"""
	Ensure a child at (10, 10) in a container at (50, 50) lands at (60, 60).
	"""
	child = scene.TextNode(left=10, top=10, content="x")
	normalized = scene.normalize_node(child, 50.0, 50.0)
	assert (normalized.left, normalized.top) == (60.0, 60.0)
	assert (child.left, child.top) == (10, 10)


#============================================
def test_nested_offsets_add_up() -> None:
	"""
	Ensure three nesting levels compose additively.
	"""
	outer = scene.ContainerNode(left=5, top=5, width=100, height=100)
	middle = scene.ContainerNode(left=10, top=20, width=50, height=50)
	inner = scene.ImageNode(left=1, top=2, width=5, height=5, src="a.png")
	outer_abs = scene.normalize_node(outer)
	middle_abs = scene.normalize_node(middle, outer_abs.left, outer_abs.top)
	inner_abs = scene.normalize_node(inner, middle_abs.left, middle_abs.top)
	assert (outer_abs.left, outer_abs.top) == (5.0, 5.0)
	assert (middle_abs.left, middle_abs.top) == (15.0, 25.0)
	assert (inner_abs.left, inner_abs.top) == (16.0, 27.0)
	assert (inner_abs.width, inner_abs.height) == (5, 5)


#============================================
def test_deferred_coordinate_resolves_once_per_pass() -> None:
	"""
	Ensure producers run exactly once during normalization.
	"""
	calls: list[int] = []

	def producer() -> float:
		calls.append(1)
		return 7.5

	node = scene.parse_node({"type": "text", "content": "x", "left": producer, "top": 3})
	assert isinstance(node.left, scene.Deferred)
	assert calls == []
	normalized = scene.normalize_node(node, 2.0, 2.0)
	assert calls == [1]
	assert (normalized.left, normalized.top) == (9.5, 5.0)
	assert isinstance(node.left, scene.Deferred)


#============================================
def test_load_scene_file(tmp_path: pathlib.Path) -> None:
	"""
	Ensure a JSON scene becomes a PosterConfig.
	"""
	path = tmp_path / "scene.json"
	payload = {
		"width": 300,
		"height": 200,
		"pixelRatio": 2,
		"backgroundColor": "#fafafa",
		"children": [{"type": "text", "content": "Title", "width": 200}],
	}
	path.write_text(json.dumps(payload), encoding="utf-8")
	poster = scene.load_scene_file(path)
	assert (poster.width, poster.height, poster.pixel_ratio) == (300, 200, 2)
	assert poster.background_color == "#fafafa"
	assert isinstance(poster.children[0], scene.TextNode)
	assert poster.children[0].width == 200.0
