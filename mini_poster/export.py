"""
Export a rendered surface to an image or PDF file.
"""

# Standard Library
import os
import pathlib
import tempfile

# PIP3 modules
import PIL.Image
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import mini_poster as mp
import mini_poster.config


ExportOptions = mp.config.ExportOptions

EXPORT_FILE_TYPES = mp.config.EXPORT_FILE_TYPES
POINTS_PER_PIXEL = mp.config.POINTS_PER_PIXEL


#============================================
def resolve_region(image: PIL.Image.Image, options: ExportOptions) -> tuple[tuple[int, int, int, int], tuple[int, int]]:
	"""
	Resolve the crop box and destination size for an export.

	Args:
		image: Backing image of the surface.
		options: Export options.

	Returns:
		Tuple of (crop box, destination size).
	"""
	width = options.width if options.width is not None else image.width - options.x
	height = options.height if options.height is not None else image.height - options.y
	if width <= 0 or height <= 0:
		raise ValueError(f"export region is empty: {width}x{height}")
	dest_width = options.dest_width if options.dest_width is not None else width
	dest_height = options.dest_height if options.dest_height is not None else height
	box = (options.x, options.y, options.x + width, options.y + height)
	return (box, (int(dest_width), int(dest_height)))


#============================================
def build_export_image(surface, options: ExportOptions) -> PIL.Image.Image:
	"""
	Crop and resize the surface image for export.

	Args:
		surface: Drawing surface.
		options: Export options.

	Returns:
		RGBA image ready to encode.
	"""
	to_image = getattr(surface, "to_image", None)
	if to_image is None:
		raise RuntimeError(
			f"export backend not available: {type(surface).__name__} has no raster image to export"
		)
	image = to_image()
	box, dest_size = resolve_region(image, options)
	region = image.crop(box)
	if region.size != dest_size:
		region = region.resize(dest_size)
	return region


#============================================
def flatten_image(image: PIL.Image.Image) -> PIL.Image.Image:
	"""
	Flatten transparency onto white for formats without alpha.

	Args:
		image: RGBA image.

	Returns:
		RGB image.
	"""
	background = PIL.Image.new("RGB", image.size, (255, 255, 255))
	background.paste(image, (0, 0), image.getchannel("A"))
	return background


#============================================
def write_pdf(image: PIL.Image.Image, output_path: pathlib.Path) -> None:
	"""
	Write an image as a single page PDF sized to the image.

	Args:
		image: RGBA image.
		output_path: Output PDF path.
	"""
	page_width = image.width * POINTS_PER_PIXEL
	page_height = image.height * POINTS_PER_PIXEL
	pdf = reportlab.pdfgen.canvas.Canvas(str(output_path), pagesize=(page_width, page_height))
	image_reader = reportlab.lib.utils.ImageReader(flatten_image(image))
	pdf.drawImage(
		image_reader,
		0,
		0,
		width=page_width,
		height=page_height,
		mask=None,
		preserveAspectRatio=False,
		anchor="sw",
	)
	pdf.showPage()
	pdf.save()


#============================================
def export_surface(
	surface,
	options: ExportOptions | None = None,
	output_path: pathlib.Path | None = None,
) -> pathlib.Path:
	"""
	Encode the surface to a file.

	Args:
		surface: Drawing surface with a to_image capability.
		options: Export options, defaults to a full size PNG.
		output_path: Target path, or None for a temporary file.

	Returns:
		Path of the written file.
	"""
	if options is None:
		options = ExportOptions()
	file_type = options.file_type.lower()
	if file_type == "jpeg":
		file_type = "jpg"
	if file_type not in EXPORT_FILE_TYPES:
		raise ValueError(f"unsupported export file type: {options.file_type}")
	image = build_export_image(surface, options)

	if output_path is None:
		handle, temp_name = tempfile.mkstemp(prefix="mini_poster_", suffix=f".{file_type}")
		os.close(handle)
		output_path = pathlib.Path(temp_name)
	output_path = pathlib.Path(output_path)

	if file_type == "png":
		image.save(output_path, format="PNG")
	elif file_type == "jpg":
		quality = int(round(max(0.0, min(1.0, options.quality)) * 100))
		flatten_image(image).save(output_path, format="JPEG", quality=max(1, quality))
	else:
		write_pdf(image, output_path)
	return output_path
