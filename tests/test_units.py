import pytest

import svg_name_grid.config
import svg_name_grid.units


#============================================
def test_cm_to_px_uses_fixed_ratio() -> None:
	"""
	One centimeter maps to the standard SVG px per cm ratio.
	"""
	assert svg_name_grid.units.cm_to_px(1.0) == svg_name_grid.config.SVG_PX_PER_CM
	assert svg_name_grid.units.cm_to_px(2.54) == pytest.approx(96.0)


#============================================
def test_px_to_cm_inverts_cm_to_px() -> None:
	"""
	Conversion back to cm recovers the input, including zero and negatives.
	"""
	for value in (0.0, -3.0, 0.1, 12.5):
		px = svg_name_grid.units.cm_to_px(value)
		assert svg_name_grid.units.px_to_cm(px) == pytest.approx(value)


#============================================
def test_parse_length_units() -> None:
	"""
	SVG length strings convert to user units.
	"""
	parse_length = svg_name_grid.units.parse_length
	assert parse_length("30", 0.0) == 30.0
	assert parse_length("30px", 0.0) == 30.0
	assert parse_length("2cm", 0.0) == pytest.approx(2 * svg_name_grid.config.SVG_PX_PER_CM)
	assert parse_length("10mm", 0.0) == pytest.approx(svg_name_grid.config.SVG_PX_PER_CM)
	assert parse_length("12pt", 0.0) == pytest.approx(16.0)
	assert parse_length("1in", 0.0) == pytest.approx(96.0)
	assert parse_length("1.5em", 0.0, font_size=20.0) == pytest.approx(30.0)
	assert parse_length("1e1", 0.0) == pytest.approx(10.0)


#============================================
def test_parse_length_fallbacks() -> None:
	"""
	Missing, unparsable and relative lengths fall back to the default.
	"""
	parse_length = svg_name_grid.units.parse_length
	assert parse_length(None, 7.0) == 7.0
	assert parse_length("", 7.0) == 7.0
	assert parse_length("wide", 7.0) == 7.0
	assert parse_length("50%", 7.0) == 7.0
	assert parse_length("3furlongs", 7.0) == 7.0
