"""
Grid assembly: one positioned, fitted template copy per name.
"""

# Standard Library
import copy
import xml.etree.ElementTree as StdElementTree

# local repo modules
import svg_name_grid as sng
import svg_name_grid.config
import svg_name_grid.errors
import svg_name_grid.fit
import svg_name_grid.layout
import svg_name_grid.measure
import svg_name_grid.svg_lib


GridLayout = sng.config.GridLayout
GridDocument = sng.config.GridDocument
Instance = sng.config.Instance
NormalizedTemplate = sng.config.NormalizedTemplate
MissingTemplate = sng.errors.MissingTemplate
MissingTextNode = sng.errors.MissingTextNode
TextMeasurer = sng.measure.TextMeasurer

format_number = sng.svg_lib.format_number


#============================================
def cell_transform(x: float, y: float, scale: float) -> str:
	"""
	Build the translate-then-scale transform for a grid cell.
	"""
	transform = f"translate({format_number(x)},{format_number(y)})"
	if scale != 1:
		transform += f" scale({format_number(scale)})"
	return transform


#============================================
def build_grid(
	names: list[str],
	layout: GridLayout,
	normalized: NormalizedTemplate | None,
	measurer: TextMeasurer,
	max_font_size: float,
	max_label_width: float,
) -> GridDocument:
	"""
	Build the composite document with one template copy per name.

	Each copy owns its own deep copy of the normalized group. Label
	widths are fitted in the output document's coordinate space, so
	max_label_width is measured after the cell scale is applied.

	Args:
		names: Labels in placement order.
		layout: Grid layout for len(names) cells.
		normalized: Normalized template.
		measurer: Text measurement capability.
		max_font_size: Starting font size in template units.
		max_label_width: Allowed label width in output units.

	Returns:
		GridDocument.
	"""
	if normalized is None:
		raise MissingTemplate("Please upload an SVG template.")

	root = sng.svg_lib.new_svg_root(layout.canvas_width, layout.canvas_height)
	instances: list[Instance] = []
	for index, name in enumerate(names):
		row, col, x, y = sng.layout.cell_position(index, layout)
		group = StdElementTree.SubElement(root, sng.svg_lib.svg_tag("g"))
		group.set("transform", cell_transform(x, y, layout.scale))
		inner = copy.deepcopy(normalized.group)
		group.append(inner)

		target = sng.svg_lib.find_text_target(inner)
		if target is None:
			raise MissingTextNode("No text element found in SVG template.")
		render_scale = layout.scale * sng.svg_lib.matrix_x_scale(target.matrix)
		font_size = sng.fit.fit_label(
			target.element,
			name,
			max_font_size,
			max_label_width,
			measurer,
			render_scale=render_scale,
			font_name=sng.svg_lib.map_font_name(target.properties),
		)
		instances.append(
			Instance(
				name=name,
				index=index,
				row=row,
				col=col,
				x=x,
				y=y,
				font_size=font_size,
			)
		)
	return GridDocument(root=root, layout=layout, instances=instances)
