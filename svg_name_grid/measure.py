"""
Geometry and text measurement.

Text widths come from ReportLab font metrics, so results approximate
what a browser would report for the same font family. Any object with
the TextMeasurer methods can stand in, which keeps the fitting loop
testable without real fonts.
"""

# Standard Library
import contextlib
import copy
import math
import typing
import xml.etree.ElementTree as StdElementTree

# PIP3 modules
import reportlab.pdfbase.pdfmetrics
import svgpathtools

# local repo modules
import svg_name_grid as sng
import svg_name_grid.config
import svg_name_grid.errors
import svg_name_grid.svg_lib
import svg_name_grid.units


BoundingBox = sng.config.BoundingBox
MeasurementUnavailable = sng.errors.MeasurementUnavailable
parse_length = sng.units.parse_length

IDENTITY = sng.svg_lib.IDENTITY
CONTAINER_TAGS = {"g", "svg", "a", "switch"}
BOX_TAGS = {"rect", "image", "foreignObject"}
XLINK_HREF = f"{{{sng.config.XLINK_NS}}}href"

Bounds = tuple[float, float, float, float]
Matrix = tuple[float, float, float, float, float, float]
References = dict[str, StdElementTree.Element]


class TextMeasurer(typing.Protocol):
	"""
	Anything that can size a run of text in a given font.
	"""

	def measure(self, text: str, font_size: float, font_name: str) -> float:
		"""
		Advance width of the text in user units.

		Args:
			text: Text to measure.
			font_size: Font size in user units.
			font_name: Font name as returned by map_font_name().

		Returns:
			Width in user units.
		"""
		...

	def vertical_extent(self, font_size: float, font_name: str) -> tuple[float, float]:
		"""
		Ascent and descent relative to the baseline.

		Returns:
			(ascent, descent) with ascent above the baseline as a positive
			number and descent below it as a negative number.
		"""
		...


class ReportLabTextMeasurer:
	"""
	Text metrics backed by ReportLab's built-in font tables.
	"""

	def measure(self, text: str, font_size: float, font_name: str) -> float:
		"""
		Width from the font's glyph advance table.
		"""
		return reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, font_size)

	def vertical_extent(self, font_size: float, font_name: str) -> tuple[float, float]:
		"""
		Ascent and descent scaled from the font's 1000 unit em.
		"""
		ascent = reportlab.pdfbase.pdfmetrics.getAscent(font_name) * font_size / 1000.0
		descent = reportlab.pdfbase.pdfmetrics.getDescent(font_name) * font_size / 1000.0
		return (ascent, descent)


#============================================
def union_bounds(first: Bounds | None, second: Bounds | None) -> Bounds | None:
	"""
	Combine two optional bounds.
	"""
	if first is None:
		return second
	if second is None:
		return first
	return (
		min(first[0], second[0]),
		min(first[1], second[1]),
		max(first[2], second[2]),
		max(first[3], second[3]),
	)


#============================================
def transform_bounds(matrix: Matrix, bounds: Bounds) -> Bounds:
	"""
	Map a local box through a matrix and return the enclosing box.
	"""
	x0, y0, x1, y1 = bounds
	corners = [
		sng.svg_lib.apply_matrix(matrix, x0, y0),
		sng.svg_lib.apply_matrix(matrix, x1, y0),
		sng.svg_lib.apply_matrix(matrix, x0, y1),
		sng.svg_lib.apply_matrix(matrix, x1, y1),
	]
	x_values = [point[0] for point in corners]
	y_values = [point[1] for point in corners]
	return (min(x_values), min(y_values), max(x_values), max(y_values))


#============================================
def points_bounds(values: list[float]) -> Bounds | None:
	"""
	Bounds of a flat x, y, x, y ... coordinate list.
	"""
	if len(values) < 2:
		return None
	x_values = values[0::2]
	y_values = values[1::2][:len(x_values)]
	x_values = x_values[:len(y_values)]
	return (min(x_values), min(y_values), max(x_values), max(y_values))


#============================================
def path_bounds(data: str | None) -> Bounds | None:
	"""
	Bounds of SVG path data.

	Args:
		data: Path "d" attribute.

	Returns:
		Bounds or None for empty or malformed path data.
	"""
	if not data or not data.strip():
		return None
	try:
		path = svgpathtools.parse_path(data)
	except (ValueError, IndexError):
		return None
	if len(path) == 0:
		return None
	xmin, xmax, ymin, ymax = path.bbox()
	return (xmin, ymin, xmax, ymax)


#============================================
def first_coordinate(value: str | None, font_size: float) -> float:
	"""
	First entry of a text x or y coordinate list.
	"""
	if not value:
		return 0.0
	tokens = value.replace(",", " ").split()
	if not tokens:
		return 0.0
	return parse_length(tokens[0], 0.0, font_size)


#============================================
def text_bounds(
	element: StdElementTree.Element,
	properties: dict[str, str],
	measurer: TextMeasurer,
) -> Bounds | None:
	"""
	Bounds of a text element from its anchor point and font metrics.

	Args:
		element: Text element.
		properties: Resolved presentation properties.
		measurer: Text measurement capability.

	Returns:
		Bounds or None if the element has no text.
	"""
	content = "".join(element.itertext())
	if not content.strip():
		return None
	font_size = sng.svg_lib.resolve_font_size(properties)
	font_name = sng.svg_lib.map_font_name(properties)

	x_value = element.get("x")
	y_value = element.get("y")
	first_span = None
	for child in list(element):
		if sng.svg_lib.local_name(child.tag) == "tspan":
			first_span = child
			break
	if first_span is not None:
		if x_value is None:
			x_value = first_span.get("x")
		if y_value is None:
			y_value = first_span.get("y")
	x = first_coordinate(x_value, font_size)
	y = first_coordinate(y_value, font_size)

	width = measurer.measure(content, font_size, font_name)
	ascent, descent = measurer.vertical_extent(font_size, font_name)
	anchor = properties.get("text-anchor", "start").strip().lower()
	if anchor == "middle":
		x0 = x - width / 2.0
	elif anchor == "end":
		x0 = x - width
	else:
		x0 = x
	return (x0, y - ascent, x0 + width, y - descent)


#============================================
def local_bounds(
	element: StdElementTree.Element,
	properties: dict[str, str],
	measurer: TextMeasurer,
) -> Bounds | None:
	"""
	Bounds of a single leaf element in its own coordinate space.
	"""
	name = sng.svg_lib.local_name(element.tag)
	font_size = sng.svg_lib.resolve_font_size(properties)

	def length(attribute: str) -> float:
		return parse_length(element.get(attribute), 0.0, font_size)

	if name in BOX_TAGS:
		width = length("width")
		height = length("height")
		if width <= 0 or height <= 0:
			return None
		x = length("x")
		y = length("y")
		return (x, y, x + width, y + height)
	if name == "circle":
		r = length("r")
		if r <= 0:
			return None
		cx = length("cx")
		cy = length("cy")
		return (cx - r, cy - r, cx + r, cy + r)
	if name == "ellipse":
		rx = length("rx")
		ry = length("ry")
		if rx <= 0 or ry <= 0:
			return None
		cx = length("cx")
		cy = length("cy")
		return (cx - rx, cy - ry, cx + rx, cy + ry)
	if name == "line":
		x1 = length("x1")
		y1 = length("y1")
		x2 = length("x2")
		y2 = length("y2")
		return (min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))
	if name in ("polyline", "polygon"):
		return points_bounds(sng.svg_lib.parse_numbers(element.get("points")))
	if name == "path":
		return path_bounds(element.get("d"))
	if name == "text":
		return text_bounds(element, properties, measurer)
	return None


#============================================
def use_extent(
	element: StdElementTree.Element,
	measurer: TextMeasurer,
	matrix: Matrix,
	properties: dict[str, str],
	references: References | None,
	visiting: frozenset[str],
) -> Bounds | None:
	"""
	Extent of the content a <use> element points at.

	The referenced element is measured in place of the <use>, offset by its
	x and y. A <symbol> target contributes its children; its viewBox is not
	applied. Unknown, external or circular references measure as empty.

	Args:
		element: The <use> element.
		measurer: Text measurement capability.
		matrix: Matrix including the <use> element's own transform.
		properties: Presentation properties resolved at the <use>.
		references: Elements by id in the measured tree.
		visiting: Ids already being expanded above this element.

	Returns:
		Bounds or None.
	"""
	href = element.get("href") or element.get(XLINK_HREF) or ""
	if not href.startswith("#") or references is None:
		return None
	ref_id = href[1:]
	target = references.get(ref_id)
	if target is None or ref_id in visiting:
		return None
	font_size = sng.svg_lib.resolve_font_size(properties)
	offset_x = parse_length(element.get("x"), 0.0, font_size)
	offset_y = parse_length(element.get("y"), 0.0, font_size)
	current = sng.svg_lib.multiply(matrix, (1.0, 0.0, 0.0, 1.0, offset_x, offset_y))
	visiting = visiting | {ref_id}
	if sng.svg_lib.local_name(target.tag) != "symbol":
		return compute_extent(target, measurer, current, properties, references, visiting)
	symbol_properties = sng.svg_lib.inherit_properties(properties, target)
	bounds: Bounds | None = None
	for child in list(target):
		child_bounds = compute_extent(child, measurer, current, symbol_properties, references, visiting)
		bounds = union_bounds(bounds, child_bounds)
	return bounds


#============================================
def compute_extent(
	element: StdElementTree.Element,
	measurer: TextMeasurer,
	matrix: Matrix = IDENTITY,
	inherited: dict[str, str] | None = None,
	references: References | None = None,
	visiting: frozenset[str] = frozenset(),
) -> Bounds | None:
	"""
	Compute the visible extent of an element subtree.

	Args:
		element: Subtree root.
		measurer: Text measurement capability.
		matrix: Matrix accumulated above the element.
		inherited: Presentation properties inherited from ancestors.
		references: Elements by id, used to resolve <use> links.
		visiting: Ids of <use> targets currently being expanded.

	Returns:
		Bounds (x0, y0, x1, y1) in the outer space, or None when nothing
		in the subtree renders.
	"""
	if sng.svg_lib.is_hidden(element):
		return None
	current = sng.svg_lib.multiply(matrix, sng.svg_lib.parse_transform(element.get("transform")))
	properties = sng.svg_lib.inherit_properties(inherited, element)
	name = sng.svg_lib.local_name(element.tag)

	if name == "use":
		return use_extent(element, measurer, current, properties, references, visiting)
	if name in CONTAINER_TAGS:
		if name == "svg":
			offset_x = parse_length(element.get("x"), 0.0)
			offset_y = parse_length(element.get("y"), 0.0)
			current = sng.svg_lib.multiply(current, (1.0, 0.0, 0.0, 1.0, offset_x, offset_y))
		bounds: Bounds | None = None
		for child in list(element):
			child_bounds = compute_extent(child, measurer, current, properties, references, visiting)
			bounds = union_bounds(bounds, child_bounds)
		return bounds

	leaf = local_bounds(element, properties, measurer)
	if leaf is None:
		return None
	return transform_bounds(current, leaf)


#============================================
@contextlib.contextmanager
def measurement_scope(children: list[StdElementTree.Element]) -> typing.Iterator[StdElementTree.Element]:
	"""
	Hold deep copies of nodes in a detached scratch root while measuring.

	The scratch root is emptied on every exit path so no measurement
	scaffolding can leak into a document.

	Args:
		children: Nodes to measure.

	Yields:
		Scratch root containing the copies.
	"""
	scratch = StdElementTree.Element(sng.svg_lib.svg_tag("svg"))
	for child in children:
		scratch.append(copy.deepcopy(child))
	try:
		yield scratch
	finally:
		scratch.clear()


#============================================
def compute_tree_bbox(
	children: list[StdElementTree.Element],
	measurer: TextMeasurer,
	matrix: Matrix = IDENTITY,
	inherited: dict[str, str] | None = None,
) -> BoundingBox:
	"""
	Measure the combined visible bounding box of a list of nodes.

	Args:
		children: Nodes to measure.
		measurer: Text measurement capability.
		matrix: Matrix applied to every node.
		inherited: Presentation properties inherited by every node.

	Returns:
		BoundingBox.
	"""
	with measurement_scope(children) as scratch:
		references = {node.get("id"): node for node in scratch.iter() if node.get("id")}
		bounds: Bounds | None = None
		for child in list(scratch):
			child_bounds = compute_extent(child, measurer, matrix, inherited, references)
			bounds = union_bounds(bounds, child_bounds)
	if bounds is None:
		raise MeasurementUnavailable("Nothing measurable in template content")
	if not all(math.isfinite(value) for value in bounds):
		raise MeasurementUnavailable("Template content has non-finite geometry")
	return BoundingBox(
		x=bounds[0],
		y=bounds[1],
		width=bounds[2] - bounds[0],
		height=bounds[3] - bounds[1],
	)
