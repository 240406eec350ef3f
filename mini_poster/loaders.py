"""
Resource fetching, image decoding and font registration.
"""

# Standard Library
import asyncio
import io
import pathlib

# PIP3 modules
import httpx
import PIL.Image
import PIL.ImageFont

# local repo modules
import mini_poster as mp
import mini_poster.config


HTTP_TIMEOUT = mp.config.HTTP_TIMEOUT
HTTP_USER_AGENT = mp.config.HTTP_USER_AGENT


#============================================
def is_remote_source(source: str) -> bool:
	"""
	Check whether a source must be fetched over HTTP.

	Args:
		source: Source identifier.

	Returns:
		True for http and https URLs.
	"""
	lowered = source.lower()
	return lowered.startswith("http://") or lowered.startswith("https://")


#============================================
def source_to_path(source: str) -> pathlib.Path:
	"""
	Convert a file URL or plain path into a Path.

	Args:
		source: Source identifier.

	Returns:
		Local file path.
	"""
	if source.startswith("file://"):
		source = source[len("file://"):]
	return pathlib.Path(source).expanduser()


#============================================
async def fetch_resource(source: str) -> bytes:
	"""
	Read the raw bytes of a resource.

	Args:
		source: URL or local path.

	Returns:
		Resource bytes.
	"""
	if is_remote_source(source):
		headers = {"User-Agent": HTTP_USER_AGENT}
		async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, follow_redirects=True, headers=headers) as client:
			response = await client.get(source)
			response.raise_for_status()
			return response.content
	path = source_to_path(source)
	return await asyncio.to_thread(path.read_bytes)


#============================================
def decode_image(data: bytes) -> PIL.Image.Image:
	"""
	Decode image bytes fully into memory.

	Args:
		data: Encoded image bytes.

	Returns:
		Decoded PIL image.
	"""
	image = PIL.Image.open(io.BytesIO(data))
	image.load()
	return image


#============================================
async def load_image(source: str) -> PIL.Image.Image:
	"""
	Fetch and decode an image.

	Args:
		source: URL or local path.

	Returns:
		Decoded PIL image exposing width and height.
	"""
	data = await fetch_resource(source)
	return await asyncio.to_thread(decode_image, data)


#============================================
def validate_font(data: bytes) -> None:
	"""
	Make sure font bytes are a face FreeType can open.

	Args:
		data: Font file bytes.
	"""
	PIL.ImageFont.truetype(io.BytesIO(data), 10)


#============================================
async def load_font_face(surface, family: str, source: str, weight: int | str | None = None) -> str:
	"""
	Fetch a font file and register it with a surface.

	Args:
		surface: Drawing surface owning the font registry.
		family: Family name used by text nodes.
		source: URL or local path of the font file.
		weight: Optional weight the face provides.

	Returns:
		The registered family name.
	"""
	data = await fetch_resource(source)
	await asyncio.to_thread(validate_font, data)
	surface.register_font(family, data, weight)
	return family
