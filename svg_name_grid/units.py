"""
Length unit conversion between centimeters and SVG user units.
"""

# Standard Library
import re

# local repo modules
import svg_name_grid as sng
import svg_name_grid.config


SVG_PX_PER_CM = sng.config.SVG_PX_PER_CM

# user units per unit, CSS absolute lengths at 96 dpi
UNIT_FACTORS = {
	"": 1.0,
	"px": 1.0,
	"cm": SVG_PX_PER_CM,
	"mm": SVG_PX_PER_CM / 10.0,
	"in": 96.0,
	"pt": 96.0 / 72.0,
	"pc": 16.0,
}

LENGTH_PATTERN = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-zA-Z%]*)\s*$")


#============================================
def cm_to_px(cm: float) -> float:
	"""
	Convert centimeters to SVG user units (px).

	Args:
		cm: Length in centimeters.

	Returns:
		Length in px.
	"""
	return cm * SVG_PX_PER_CM


#============================================
def px_to_cm(px: float) -> float:
	"""
	Convert SVG user units (px) to centimeters.

	Args:
		px: Length in px.

	Returns:
		Length in centimeters.
	"""
	return px / SVG_PX_PER_CM


#============================================
def parse_length(value: str | None, default_value: float, font_size: float = 16.0) -> float:
	"""
	Parse an SVG length string into user units.

	Percentages have no reference box here and return the default.

	Args:
		value: String value like "2cm", "12pt" or "30".
		default_value: Fallback when the value is missing or unparsable.
		font_size: Font size used for em and ex units.

	Returns:
		Length in px.
	"""
	if value is None:
		return default_value
	match = LENGTH_PATTERN.match(str(value))
	if match is None:
		return default_value
	number = float(match.group(1))
	unit = match.group(2).lower()
	if unit == "em":
		return number * font_size
	if unit == "ex":
		return number * font_size / 2.0
	if unit not in UNIT_FACTORS:
		return default_value
	return number * UNIT_FACTORS[unit]
