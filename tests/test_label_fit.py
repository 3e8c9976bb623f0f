import xml.etree.ElementTree as StdElementTree

import pytest

import svg_name_grid.config
import svg_name_grid.errors
import svg_name_grid.fit
import svg_name_grid.session
import svg_name_grid.svg_lib


#============================================
def make_text(**attributes: str) -> StdElementTree.Element:
	"""
	Build a bare SVG text element.
	"""
	element = StdElementTree.Element(svg_name_grid.svg_lib.svg_tag("text"), attributes)
	element.text = "Name"
	return element


#============================================
def test_shrinks_until_label_fits(stub_measurer) -> None:
	"""
	An 80 wide label at size 20 shrinks by 5% steps below a 40 budget.
	"""
	element = make_text()
	label = "ABCDEFGH"
	assert stub_measurer.measure(label, 20.0, "Helvetica") == 80.0
	font_size = svg_name_grid.fit.fit_label(element, label, 20.0, 40.0, stub_measurer)
	assert font_size == pytest.approx(20.0 * 0.95 ** 14)
	assert stub_measurer.measure(label, font_size, "Helvetica") <= 40.0
	assert stub_measurer.measure(label, font_size / 0.95, "Helvetica") > 40.0
	assert element.text == label
	assert element.get("font-size") == svg_name_grid.svg_lib.format_number(font_size)


#============================================
def test_label_that_fits_keeps_max_size(stub_measurer) -> None:
	"""
	No shrinking happens when the label already fits.
	"""
	element = make_text()
	font_size = svg_name_grid.fit.fit_label(element, "Al", 20.0, 40.0, stub_measurer)
	assert font_size == 20.0
	assert stub_measurer.calls == 1


#============================================
def test_stops_at_floor(stub_measurer) -> None:
	"""
	A label that never fits ends exactly at the minimum font size.
	"""
	element = make_text()
	font_size = svg_name_grid.fit.fit_label(element, "W" * 200, 20.0, 1.0, stub_measurer)
	assert font_size == svg_name_grid.config.MIN_FONT_SIZE


#============================================
def test_result_bounds_and_iteration_limit(stub_measurer) -> None:
	"""
	Results stay within [floor, max] after a bounded number of measurements.
	"""
	floor = svg_name_grid.config.MIN_FONT_SIZE
	for max_font_size in (1.5, 8.0, 20.0, 144.0):
		limit = svg_name_grid.fit.max_fit_iterations(max_font_size)
		for label in ("A", "Jo", "Alexandra", "X" * 60):
			for budget in (0.1, 5.0, 40.0, 500.0):
				stub_measurer.calls = 0
				font_size = svg_name_grid.fit.fit_label(
					make_text(), label, max_font_size, budget, stub_measurer
				)
				assert floor <= font_size <= max_font_size
				assert stub_measurer.calls <= limit + 1


#============================================
def test_wider_labels_never_get_larger_fonts(stub_measurer) -> None:
	"""
	Fitted size does not increase with label width for a fixed budget.
	"""
	labels = ["Al", "Anna", "Alexandra", "Bartholomew", "Bartholomew-Smithson"]
	for budget in (10.0, 40.0, 90.0):
		sizes = [
			svg_name_grid.fit.fit_label(make_text(), label, 20.0, budget, stub_measurer)
			for label in labels
		]
		for wider, narrower in zip(sizes[1:], sizes[:-1]):
			assert wider <= narrower


#============================================
def test_widths_compared_in_rendered_space(stub_measurer) -> None:
	"""
	The render scale applies to measured widths before comparison.
	"""
	label = "ABCDEFGH"
	unscaled = svg_name_grid.fit.fit_label(make_text(), label, 20.0, 40.0, stub_measurer)
	scaled = svg_name_grid.fit.fit_label(make_text(), label, 20.0, 40.0, stub_measurer, render_scale=0.5)
	assert unscaled < 20.0
	assert scaled == 20.0


#============================================
def test_missing_text_node(stub_measurer) -> None:
	"""
	A missing text element is reported instead of ignored.
	"""
	with pytest.raises(svg_name_grid.errors.MissingTextNode):
		svg_name_grid.fit.fit_label(None, "Ann", 20.0, 40.0, stub_measurer)


#============================================
def test_replaces_tspans_and_style_size(stub_measurer) -> None:
	"""
	Setting the label drops tspans and overrides inline font sizes.
	"""
	element = make_text(style="font-size:30px;fill:#000000")
	span = StdElementTree.SubElement(element, svg_name_grid.svg_lib.svg_tag("tspan"))
	span.text = "Placeholder"
	svg_name_grid.fit.fit_label(element, "Ann", 12.0, 100.0, stub_measurer)
	assert len(element) == 0
	assert element.text == "Ann"
	style = svg_name_grid.svg_lib.parse_style(element.get("style"))
	assert style["font-size"] == "12px"
	assert style["fill"] == "#000000"


#============================================
def test_rejects_non_shrinking_step(stub_measurer) -> None:
	"""
	A step that cannot shrink the font is refused.
	"""
	with pytest.raises(ValueError):
		svg_name_grid.fit.fit_label(make_text(), "Ann", 20.0, 1.0, stub_measurer, shrink_step=1.0)


#============================================
def test_class_styled_template_sizes_stick(stub_measurer) -> None:
	"""
	Fitted sizes override a stylesheet class font size in the output.
	"""
	data = (
		'<svg xmlns="http://www.w3.org/2000/svg" width="100" height="30">'
		'<style>.cls-1{font-size:20px}</style>'
		'<rect width="100" height="30"/>'
		'<text class="cls-1" x="10" y="20">Name</text></svg>'
	)
	session = svg_name_grid.session.GridSession(measurer=stub_measurer)
	assert session.load_template(data, "styled.svg") is not None
	assert session.template.font_size == 20.0
	session.set_names(["Ann", "Bartholomew Longname"])
	document = session.update()
	assert document is not None

	short, long = document.instances
	assert short.font_size == pytest.approx(20.0)
	assert long.font_size < short.font_size
	texts = list(document.root.iter(svg_name_grid.svg_lib.svg_tag("text")))
	assert [text.text for text in texts] == ["Ann", "Bartholomew Longname"]
	for text, instance in zip(texts, document.instances):
		style = svg_name_grid.svg_lib.parse_style(text.get("style"))
		assert style["font-size"] == svg_name_grid.svg_lib.format_number(instance.font_size) + "px"
		assert text.get("class") == "cls-1"
