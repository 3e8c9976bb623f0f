"""
Shrink-to-fit for label text.
"""

# Standard Library
import math
import xml.etree.ElementTree as StdElementTree

# local repo modules
import svg_name_grid as sng
import svg_name_grid.config
import svg_name_grid.errors
import svg_name_grid.measure
import svg_name_grid.svg_lib


MissingTextNode = sng.errors.MissingTextNode
TextMeasurer = sng.measure.TextMeasurer

FONT_SHRINK_STEP = sng.config.FONT_SHRINK_STEP
MIN_FONT_SIZE = sng.config.MIN_FONT_SIZE
DEFAULT_FONT_REGULAR = sng.config.DEFAULT_FONT_REGULAR


#============================================
def max_fit_iterations(
	max_font_size: float,
	min_font_size: float = MIN_FONT_SIZE,
	shrink_step: float = FONT_SHRINK_STEP,
) -> int:
	"""
	Upper bound on shrink steps from max_font_size down to the floor.
	"""
	if max_font_size <= min_font_size:
		return 0
	return math.ceil(math.log(min_font_size / max_font_size) / math.log(shrink_step))


#============================================
def fit_label(
	text_element: StdElementTree.Element | None,
	label: str,
	max_font_size: float,
	max_label_width: float,
	measurer: TextMeasurer,
	render_scale: float = 1.0,
	font_name: str = DEFAULT_FONT_REGULAR,
	min_font_size: float = MIN_FONT_SIZE,
	shrink_step: float = FONT_SHRINK_STEP,
) -> float:
	"""
	Set a label on a text element and shrink it until it fits.

	Font sizes are in the text element's own units. Widths are compared
	after multiplying by render_scale, so max_label_width is a width in
	the final rendered space of the output document.

	Args:
		text_element: Text element to fill.
		label: Label text.
		max_font_size: Starting font size.
		max_label_width: Allowed rendered label width.
		measurer: Text measurement capability.
		render_scale: Scale from text units to rendered units.
		font_name: Font used for metrics.
		min_font_size: Font size floor.
		shrink_step: Multiplicative step, between 0 and 1.

	Returns:
		Final font size, within [min_font_size, max_font_size] whenever
		max_font_size is above the floor.
	"""
	if text_element is None:
		raise MissingTextNode("No text element found in SVG template.")
	if not 0.0 < shrink_step < 1.0:
		raise ValueError(f"shrink_step must be between 0 and 1, got {shrink_step}")

	sng.svg_lib.set_text_content(text_element, label)
	font_size = max_font_size
	sng.svg_lib.set_font_size(text_element, font_size)
	width = measurer.measure(label, font_size, font_name) * render_scale
	while width > max_label_width and font_size > min_font_size:
		font_size = max(font_size * shrink_step, min_font_size)
		sng.svg_lib.set_font_size(text_element, font_size)
		width = measurer.measure(label, font_size, font_name) * render_scale
	return font_size
