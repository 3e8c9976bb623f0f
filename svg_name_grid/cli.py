"""
CLI entry point for building name tag grids from an SVG template.
"""

# Standard Library
import argparse
import pathlib
import time

# local repo modules
import svg_name_grid as sng
import svg_name_grid.config
import svg_name_grid.session


GridParams = sng.config.GridParams
GridSession = sng.session.GridSession


#============================================
def build_params(args: argparse.Namespace) -> GridParams:
	"""
	Build sizing parameters from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		GridParams; unset options fall back to template defaults.
	"""
	return GridParams(
		clone_width_cm=args.clone_width,
		max_grid_width_cm=args.max_grid_width,
		max_font_size_cm=args.max_font_size,
		max_name_width=args.max_name_width,
	)


#============================================
def read_names(args: argparse.Namespace) -> str:
	"""
	Collect names from the names file and repeated --name options.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Names as newline separated text.
	"""
	lines: list[str] = []
	if args.names_path:
		lines.append(pathlib.Path(args.names_path).read_text(encoding="utf-8"))
	lines.extend(args.names)
	return "\n".join(lines)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Lay out one copy of an SVG template per name.")
	parser.add_argument("template", help="SVG template with one text placeholder.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-n", "--names-file", dest="names_path", default=None, help="Text file with one name per line.")
	input_group.add_argument("-a", "--name", dest="names", action="append", default=[], help="Add a single name.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output SVG path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")

	size_group = parser.add_argument_group("Sizing")
	size_group.add_argument("-w", "--clone-width", dest="clone_width", default=None, help="Width of each copy in cm.")
	size_group.add_argument("-g", "--max-grid-width", dest="max_grid_width", default=None, help="Maximum grid width in cm.")
	size_group.add_argument("-f", "--max-font-size", dest="max_font_size", default=None, help="Maximum font size in cm.")
	size_group.add_argument(
		"-r",
		"--max-name-width",
		dest="max_name_width",
		default=None,
		help="Maximum name width as a fraction of the copy width.",
	)

	parser.add_argument("-q", "--quiet", dest="verbose", action="store_false", help="Only print errors that stop the build.")
	parser.set_defaults(verbose=True)

	args = parser.parse_args(argv)
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> int:
	"""
	Build the grid and write the output files.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Process exit code.
	"""
	start_time = time.perf_counter()
	template_path = pathlib.Path(args.template)
	session = GridSession(verbose=args.verbose)
	template = session.load_template_file(template_path)
	if template is None:
		return 1
	session.set_names(read_names(args))
	session.set_params(build_params(args))

	document = session.update()
	if document is None:
		return 1

	output_path = args.output_path
	if output_path is None:
		output_path = template_path.parent / session.output_file_name
	output_path = pathlib.Path(output_path)
	session.write(output_path)

	if args.manifest_path:
		sng.session.write_manifest(
			pathlib.Path(args.manifest_path),
			document,
			template.file_name,
			output_path.name,
		)

	if args.verbose:
		layout = document.layout
		print(f"Template: {template_path} ({template.width:g} x {template.height:g})")
		print(f"Names: {len(document.instances)}")
		print(f"Grid: {layout.columns} columns x {layout.rows} rows")
		print(f"Canvas: {layout.canvas_width:.2f} x {layout.canvas_height:.2f} px")
		print(f"Output SVG: {output_path}")
		if args.manifest_path:
			print(f"Manifest: {args.manifest_path}")
		print(f"Timing: total={time.perf_counter() - start_time:.2f}s")
	return 0


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	raise SystemExit(run_pipeline(args))
