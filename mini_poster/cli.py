"""
CLI entry point for rendering poster scenes.
"""

# Standard Library
import argparse
import asyncio
import pathlib
import time

# local repo modules
import mini_poster as mp
import mini_poster.config
import mini_poster.render
import mini_poster.scene
import mini_poster.surface


RenderOptions = mp.config.RenderOptions
ExportOptions = mp.config.ExportOptions

DEFAULT_PIXEL_RATIO = mp.config.DEFAULT_PIXEL_RATIO
DEFAULT_EXPORT_QUALITY = mp.config.DEFAULT_EXPORT_QUALITY
EXPORT_FILE_TYPES = mp.config.EXPORT_FILE_TYPES


#============================================
def build_export_options(args: argparse.Namespace) -> ExportOptions:
	"""
	Build export options from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		ExportOptions.
	"""
	file_type = args.file_type
	if file_type is None:
		suffix = pathlib.Path(args.output_path).suffix.lower().lstrip(".")
		file_type = "jpg" if suffix == "jpeg" else suffix
	if file_type not in EXPORT_FILE_TYPES:
		file_type = "png"
	return ExportOptions(
		dest_width=args.dest_width,
		dest_height=args.dest_height,
		file_type=file_type,
		quality=args.quality,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render a JSON poster scene to an image.")
	parser.add_argument("scene_path", help="Poster scene JSON file.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output image path.")
	output_group.add_argument(
		"-t", "--file-type", dest="file_type", choices=EXPORT_FILE_TYPES, default=None,
		help="Output format (default: from the output suffix).",
	)
	output_group.add_argument("-Q", "--quality", dest="quality", type=float, default=DEFAULT_EXPORT_QUALITY, help="JPEG quality from 0 to 1.")
	output_group.add_argument("--dest-width", dest="dest_width", type=int, default=None, help="Output width in pixels.")
	output_group.add_argument("--dest-height", dest="dest_height", type=int, default=None, help="Output height in pixels.")

	render_group = parser.add_argument_group("Rendering")
	render_group.add_argument("-r", "--pixel-ratio", dest="pixel_ratio", type=float, default=None, help="Device pixel ratio.")
	render_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Report skipped nodes.")
	render_group.add_argument("-q", "--quiet", dest="verbose", action="store_false", help="Only print the summary.")

	parser.set_defaults(verbose=False)

	args = parser.parse_args(argv)
	return args


#============================================
async def render_scene(args: argparse.Namespace) -> tuple[list, pathlib.Path]:
	"""
	Render the scene file and export it.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Tuple of (draw results, written path).
	"""
	poster_config = mp.scene.load_scene_file(pathlib.Path(args.scene_path))
	options = RenderOptions()
	if args.pixel_ratio is not None:
		options.pixel_ratio = args.pixel_ratio
		poster_config.pixel_ratio = None
	surface = mp.surface.RasterSurface()
	poster = mp.render.Poster(surface, options, verbose=args.verbose)
	results = await poster.render(poster_config)
	output_path = await poster.export(build_export_options(args), pathlib.Path(args.output_path))
	return (results, output_path)


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run the render pipeline and print a summary.

	Args:
		args: Parsed argparse namespace.
	"""
	print("Poster render pipeline")
	print(f"Scene: {args.scene_path}")
	print(f"Output: {args.output_path}")
	if args.pixel_ratio is not None:
		print(f"Pixel ratio: {args.pixel_ratio}")

	start_time = time.perf_counter()
	results, output_path = asyncio.run(render_scene(args))
	total_time = time.perf_counter() - start_time

	drawn, skipped = mp.render.summarize_results(results)
	print(f"Nodes drawn: {drawn}")
	if skipped > 0:
		print(f"Nodes skipped: {skipped}")
	print(f"Timing: total={total_time:.2f}s")
	print(f"Poster written: {output_path}")


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	run_pipeline(args)


if __name__ == "__main__":
	main()
