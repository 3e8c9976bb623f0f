import pytest

import svg_name_grid.assemble
import svg_name_grid.errors
import svg_name_grid.layout
import svg_name_grid.normalize
import svg_name_grid.svg_lib


NAMES = ["A", "B", "C", "D", "E"]


#============================================
def build_reference(badge_svg: str, stub_measurer, names: list[str]):
	"""
	Build the grid for the 100 x 30 badge at half scale.
	"""
	template = svg_name_grid.svg_lib.parse_template(badge_svg, "badge.svg")
	normalized = svg_name_grid.normalize.normalize_template(template, stub_measurer)
	layout = svg_name_grid.layout.compute_layout(len(names), 50.0, template.width, template.height, 220.0)
	return svg_name_grid.assemble.build_grid(names, layout, normalized, stub_measurer, 20.0, 40.0)


#============================================
def test_reference_grid(badge_svg, stub_measurer) -> None:
	"""
	Five names land on a 4 x 2 grid with the fifth at (0, 15).
	"""
	document = build_reference(badge_svg, stub_measurer, NAMES)
	root = document.root
	assert root.get("width") == "200"
	assert root.get("height") == "30"
	assert root.get("viewBox") == "0 0 200 30"
	assert len(root) == 5

	last = document.instances[4]
	assert (last.name, last.row, last.col, last.x, last.y) == ("E", 1, 0, 0.0, 15.0)
	assert root[4].get("transform") == "translate(0,15) scale(0.5)"
	assert root[1].get("transform") == "translate(50,0) scale(0.5)"


#============================================
def test_each_instance_has_its_own_label(badge_svg, stub_measurer) -> None:
	"""
	Every cell carries its own text element holding its own name.
	"""
	document = build_reference(badge_svg, stub_measurer, NAMES)
	texts = []
	for group, name in zip(document.root, NAMES):
		target = svg_name_grid.svg_lib.find_text_target(group)
		assert target is not None
		assert target.element.text == name
		texts.append(target.element)
	assert len({id(element) for element in texts}) == len(NAMES)


#============================================
def test_labels_fit_in_output_space(badge_svg, stub_measurer) -> None:
	"""
	Fitted widths respect the budget after the cell scale is applied.
	"""
	names = ["Al", "Christopher", "Maximiliana-Theodora"]
	document = build_reference(badge_svg, stub_measurer, names)
	scale = document.layout.scale
	for instance in document.instances:
		width = stub_measurer.measure(instance.name, instance.font_size, "Helvetica") * scale
		assert width <= 40.0 or instance.font_size == 1.0
		assert instance.font_size <= 20.0
	assert document.instances[0].font_size == 20.0


#============================================
def test_build_is_deterministic(badge_svg, stub_measurer) -> None:
	"""
	Identical inputs produce identical documents.
	"""
	first = build_reference(badge_svg, stub_measurer, NAMES)
	second = build_reference(badge_svg, stub_measurer, NAMES)
	assert svg_name_grid.svg_lib.serialize(first.root) == svg_name_grid.svg_lib.serialize(second.root)
	assert first.instances == second.instances


#============================================
def test_empty_names_give_empty_canvas(badge_svg, stub_measurer) -> None:
	"""
	No names means zero rows and no instances.
	"""
	document = build_reference(badge_svg, stub_measurer, [])
	assert document.layout.rows == 0
	assert document.root.get("height") == "0"
	assert len(document.root) == 0
	assert document.instances == []


#============================================
def test_missing_template(stub_measurer) -> None:
	"""
	Building without a template is refused.
	"""
	layout = svg_name_grid.layout.compute_layout(1, 50.0, 100.0, 30.0, 220.0)
	with pytest.raises(svg_name_grid.errors.MissingTemplate):
		svg_name_grid.assemble.build_grid(["A"], layout, None, stub_measurer, 20.0, 40.0)


#============================================
def test_missing_text_node(stub_measurer) -> None:
	"""
	A template without a placeholder aborts the build.
	"""
	data = '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="30"><rect width="100" height="30"/></svg>'
	template = svg_name_grid.svg_lib.parse_template(data)
	normalized = svg_name_grid.normalize.normalize_template(template, stub_measurer)
	layout = svg_name_grid.layout.compute_layout(1, 50.0, 100.0, 30.0, 220.0)
	with pytest.raises(svg_name_grid.errors.MissingTextNode):
		svg_name_grid.assemble.build_grid(["A"], layout, normalized, stub_measurer, 20.0, 40.0)


#============================================
def test_unit_scale_omits_scale_transform() -> None:
	"""
	Cells at native size only carry a translation.
	"""
	assert svg_name_grid.assemble.cell_transform(100.0, 30.0, 1.0) == "translate(100,30)"
	assert svg_name_grid.assemble.cell_transform(0.0, 0.0, 0.25) == "translate(0,0) scale(0.25)"
