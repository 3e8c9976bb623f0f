"""
Template normalization: move the visible content to the origin.
"""

# Standard Library
import copy
import xml.etree.ElementTree as StdElementTree

# local repo modules
import svg_name_grid as sng
import svg_name_grid.config
import svg_name_grid.errors
import svg_name_grid.measure
import svg_name_grid.svg_lib


BoundingBox = sng.config.BoundingBox
Template = sng.config.Template
NormalizedTemplate = sng.config.NormalizedTemplate
MeasurementUnavailable = sng.errors.MeasurementUnavailable
TextMeasurer = sng.measure.TextMeasurer


#============================================
def compute_bounding_box(
	children: list[StdElementTree.Element],
	measurer: TextMeasurer,
) -> BoundingBox:
	"""
	Measure the combined visible bounding box of template children.

	Args:
		children: Template child nodes.
		measurer: Text measurement capability.

	Returns:
		BoundingBox; a zero box at the origin when geometry is unavailable.
	"""
	try:
		return sng.measure.compute_tree_bbox(children, measurer)
	except MeasurementUnavailable:
		return BoundingBox(x=0.0, y=0.0, width=0.0, height=0.0)


#============================================
def build_normalized_group(
	children: list[StdElementTree.Element],
	bbox: BoundingBox,
) -> StdElementTree.Element:
	"""
	Wrap deep copies of the children in a group translated to the origin.

	Args:
		children: Template child nodes.
		bbox: Bounding box of the children.

	Returns:
		Group element carrying translate(-x, -y).
	"""
	group = StdElementTree.Element(sng.svg_lib.svg_tag("g"))
	tx = sng.svg_lib.format_number(-bbox.x)
	ty = sng.svg_lib.format_number(-bbox.y)
	group.set("transform", f"translate({tx},{ty})")
	for child in children:
		group.append(copy.deepcopy(child))
	return group


#============================================
def normalize_template(template: Template, measurer: TextMeasurer) -> NormalizedTemplate:
	"""
	Build the origin-anchored copy of a template, once per upload.

	Args:
		template: Parsed template.
		measurer: Text measurement capability.

	Returns:
		NormalizedTemplate.
	"""
	children = list(template.root)
	bbox = compute_bounding_box(children, measurer)
	group = build_normalized_group(children, bbox)
	return NormalizedTemplate(
		group=group,
		bbox=bbox,
		width=template.width,
		height=template.height,
	)
