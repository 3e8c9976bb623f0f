"""
Session state: current template, names and sizing parameters.

A session replaces the module-level globals of a single-page tool. Every
call to update() recomputes the whole grid from the current inputs.
"""

# Standard Library
import json
import math
import pathlib
import typing

# local repo modules
import svg_name_grid as sng
import svg_name_grid.assemble
import svg_name_grid.config
import svg_name_grid.errors
import svg_name_grid.layout
import svg_name_grid.measure
import svg_name_grid.normalize
import svg_name_grid.svg_lib
import svg_name_grid.units


GridDocument = sng.config.GridDocument
GridParams = sng.config.GridParams
NormalizedTemplate = sng.config.NormalizedTemplate
Notice = sng.config.Notice
Template = sng.config.Template
NameGridError = sng.errors.NameGridError
TemplateParseError = sng.errors.TemplateParseError
TextMeasurer = sng.measure.TextMeasurer

cm_to_px = sng.units.cm_to_px
px_to_cm = sng.units.px_to_cm

DEFAULT_CLONE_WIDTH_CM = sng.config.DEFAULT_CLONE_WIDTH_CM
DEFAULT_MAX_GRID_WIDTH_CM = sng.config.DEFAULT_MAX_GRID_WIDTH_CM
MIN_PARAM_CM = sng.config.MIN_PARAM_CM
MAX_CLONE_WIDTH_CM = sng.config.MAX_CLONE_WIDTH_CM
MAX_GRID_WIDTH_CM = sng.config.MAX_GRID_WIDTH_CM
MIN_NAME_WIDTH = sng.config.MIN_NAME_WIDTH
MAX_NAME_WIDTH = sng.config.MAX_NAME_WIDTH
DEFAULT_NAME_WIDTH = sng.config.DEFAULT_NAME_WIDTH
DEFAULT_TEMPLATE_FONT_SIZE = sng.config.DEFAULT_TEMPLATE_FONT_SIZE
MAX_FONT_SIZE_FACTOR = sng.config.MAX_FONT_SIZE_FACTOR
DEFAULT_OUTPUT_NAME = sng.config.DEFAULT_OUTPUT_NAME
OUTPUT_SUFFIX = sng.config.OUTPUT_SUFFIX
STRUCTURAL_NOTICES = sng.config.STRUCTURAL_NOTICES


#============================================
def parse_names(text: str) -> list[str]:
	"""
	Split free text into trimmed, non-empty names.

	Args:
		text: One name per line.

	Returns:
		Names in input order.
	"""
	return [line.strip() for line in text.splitlines() if line.strip()]


#============================================
def suggest_file_name(file_name: str | None) -> str:
	"""
	Derive the download file name from the uploaded template name.

	Args:
		file_name: Uploaded template file name.

	Returns:
		Output file name.
	"""
	if not file_name:
		return DEFAULT_OUTPUT_NAME
	name = pathlib.PurePath(file_name).name
	dot_index = name.rfind(".")
	base_name = name[:dot_index] if dot_index > 0 else name
	return base_name + OUTPUT_SUFFIX


#============================================
def validate_number_input(
	raw: float | str | None,
	label: str,
	minimum: float,
	maximum: float,
	fallback: float,
	notify: typing.Callable[[str, str], None],
) -> float:
	"""
	Parse a sizing parameter and clamp it to its range.

	Invalid input degrades to the fallback and out-of-range input is
	clamped; both report an InvalidNumericInput notice. None means the
	caller asked for the default and is not reported.

	Args:
		raw: Raw parameter value.
		label: Human readable parameter name.
		minimum: Smallest allowed value.
		maximum: Largest allowed value.
		fallback: Value used for missing or unparsable input.
		notify: Callback taking (kind, message).

	Returns:
		Validated value.
	"""
	if raw is None:
		return fallback
	try:
		value = float(raw)
	except (TypeError, ValueError):
		value = math.nan
	if not math.isfinite(value):
		notify("InvalidNumericInput", f"Invalid value for {label}. Using fallback: {fallback}")
		return fallback
	if value < minimum:
		notify("InvalidNumericInput", f"Value for {label} too small. Clamped to {minimum}.")
		return minimum
	if value > maximum:
		notify("InvalidNumericInput", f"Value for {label} too large. Clamped to {maximum}.")
		return maximum
	return value


#============================================
def measure_name_width(template: Template, measurer: TextMeasurer) -> float:
	"""
	Measure the placeholder text width as a fraction of the template width.

	Args:
		template: Parsed template.
		measurer: Text measurement capability.

	Returns:
		Fraction clamped to the allowed name width range, or the default
		fraction when the placeholder cannot be measured.
	"""
	target = sng.svg_lib.find_text_target(template.root)
	if target is None:
		return DEFAULT_NAME_WIDTH
	with sng.measure.measurement_scope([target.element]) as scratch:
		bounds = sng.measure.text_bounds(scratch[0], target.properties, measurer)
	if bounds is None:
		return DEFAULT_NAME_WIDTH
	x0, _y0, x1, _y1 = sng.measure.transform_bounds(target.matrix, bounds)
	fraction = (x1 - x0) / template.width
	return min(MAX_NAME_WIDTH, max(MIN_NAME_WIDTH, fraction))


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	document: GridDocument,
	template_name: str | None,
	output_name: str,
) -> None:
	"""
	Write a manifest JSON file describing a generated grid.

	Args:
		manifest_path: Output path.
		document: Generated grid document.
		template_name: Uploaded template file name.
		output_name: Output SVG file name.
	"""
	layout = document.layout
	data = {
		"template": template_name,
		"output": output_name,
		"instance_count": len(document.instances),
		"layout": {
			"columns": layout.columns,
			"rows": layout.rows,
			"scale": layout.scale,
			"cell_width": layout.cell_width,
			"cell_height": layout.cell_height,
			"canvas_width": layout.canvas_width,
			"canvas_height": layout.canvas_height,
		},
		"instances": [
			{
				"name": instance.name,
				"row": instance.row,
				"col": instance.col,
				"x": instance.x,
				"y": instance.y,
				"font_size": instance.font_size,
			}
			for instance in document.instances
		],
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)


class GridSession:
	"""
	Holds the current template and inputs and rebuilds the grid on demand.

	Structural errors keep the previous document; validation problems are
	corrected and reported through notices.
	"""

	def __init__(self, measurer: TextMeasurer | None = None, verbose: bool = False):
		if measurer is None:
			measurer = sng.measure.ReportLabTextMeasurer()
		self.measurer = measurer
		self.verbose = verbose
		self.template: Template | None = None
		self.normalized: NormalizedTemplate | None = None
		self.names: list[str] = []
		self.params = GridParams()
		self.document: GridDocument | None = None
		self.notices: list[Notice] = []
		self.default_font_size_cm = px_to_cm(DEFAULT_TEMPLATE_FONT_SIZE)
		self.max_font_size_cm = self.default_font_size_cm * MAX_FONT_SIZE_FACTOR
		self.default_name_width = DEFAULT_NAME_WIDTH

	#============================================
	def notify(self, kind: str, message: str) -> None:
		"""
		Record a user-facing notice.

		Structural errors are printed even when the session is quiet.
		"""
		notice = Notice(kind=kind, message=message)
		self.notices.append(notice)
		if self.verbose or kind in STRUCTURAL_NOTICES:
			print(f"{kind}: {message}")

	#============================================
	def load_template(self, data: bytes | str, file_name: str | None = None) -> Template | None:
		"""
		Replace the current template with a new upload.

		Derives the default font size and name width from the placeholder
		and normalizes the template once for all later builds.

		Args:
			data: SVG document bytes or text.
			file_name: Upload file name.

		Returns:
			Template, or None when the upload cannot be parsed.
		"""
		self.notices = []
		try:
			template = sng.svg_lib.parse_template(data, file_name)
		except TemplateParseError as error:
			self.notify("TemplateParseError", str(error))
			return None
		self.template = template
		self.default_font_size_cm = px_to_cm(template.font_size)
		self.max_font_size_cm = self.default_font_size_cm * MAX_FONT_SIZE_FACTOR
		self.default_name_width = measure_name_width(template, self.measurer)
		self.normalized = sng.normalize.normalize_template(template, self.measurer)
		return template

	#============================================
	def load_template_file(self, path: pathlib.Path) -> Template | None:
		"""
		Load a template from disk.
		"""
		return self.load_template(path.read_bytes(), path.name)

	#============================================
	def set_names(self, names: str | list[str]) -> list[str]:
		"""
		Set the names from free text or a list.
		"""
		if isinstance(names, str):
			self.names = parse_names(names)
		else:
			self.names = [name.strip() for name in names if name.strip()]
		return self.names

	#============================================
	def set_params(self, params: GridParams) -> None:
		self.params = params

	#============================================
	def resolve_params(self) -> dict[str, float]:
		"""
		Validate the sizing parameters and convert lengths to user units.

		Returns:
			Dict with clone_width, max_grid_width, max_font_size (px) and
			max_name_width (fraction of the cell width).
		"""
		clone_width_cm = validate_number_input(
			self.params.clone_width_cm,
			"clone width",
			MIN_PARAM_CM,
			MAX_CLONE_WIDTH_CM,
			DEFAULT_CLONE_WIDTH_CM,
			self.notify,
		)
		max_grid_width_cm = validate_number_input(
			self.params.max_grid_width_cm,
			"max grid width",
			MIN_PARAM_CM,
			MAX_GRID_WIDTH_CM,
			DEFAULT_MAX_GRID_WIDTH_CM,
			self.notify,
		)
		font_maximum = max(MIN_PARAM_CM, self.max_font_size_cm)
		max_font_size_cm = validate_number_input(
			self.params.max_font_size_cm,
			"max font size",
			MIN_PARAM_CM,
			font_maximum,
			min(font_maximum, max(MIN_PARAM_CM, self.default_font_size_cm)),
			self.notify,
		)
		max_name_width = validate_number_input(
			self.params.max_name_width,
			"max name width",
			MIN_NAME_WIDTH,
			MAX_NAME_WIDTH,
			self.default_name_width,
			self.notify,
		)
		return {
			"clone_width": cm_to_px(clone_width_cm),
			"max_grid_width": cm_to_px(max_grid_width_cm),
			"max_font_size": cm_to_px(max_font_size_cm),
			"max_name_width": max_name_width,
		}

	#============================================
	def update(self) -> GridDocument | None:
		"""
		Recompute the full grid from the current inputs.

		Notices only describe the latest call.

		Returns:
			New GridDocument, or None when no template is loaded or the
			template has no text placeholder.
		"""
		self.notices = []
		if self.template is None or self.normalized is None:
			self.notify("MissingTemplate", "Please upload an SVG template.")
			return None
		if not self.names:
			self.notify("EmptyNameList", "Please enter at least one name.")

		values = self.resolve_params()
		layout = sng.layout.compute_layout(
			len(self.names),
			values["clone_width"],
			self.normalized.width,
			self.normalized.height,
			values["max_grid_width"],
		)
		try:
			document = sng.assemble.build_grid(
				self.names,
				layout,
				self.normalized,
				self.measurer,
				values["max_font_size"],
				values["max_name_width"] * layout.cell_width,
			)
		except NameGridError as error:
			self.notify(type(error).__name__, str(error))
			return None
		self.document = document
		return document

	#============================================
	@property
	def output_file_name(self) -> str:
		if self.template is None:
			return DEFAULT_OUTPUT_NAME
		return suggest_file_name(self.template.file_name)

	#============================================
	def export_bytes(self) -> bytes | None:
		"""
		Serialize the latest document for download.
		"""
		if self.document is None:
			return None
		return sng.svg_lib.serialize(self.document.root)

	#============================================
	def write(self, output_path: pathlib.Path) -> bool:
		"""
		Write the latest document to disk.

		Args:
			output_path: Destination SVG path.

		Returns:
			True if a document was written.
		"""
		data = self.export_bytes()
		if data is None:
			return False
		output_path.write_bytes(data)
		return True
