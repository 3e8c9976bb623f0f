"""
Shared configuration, constants and data containers.
"""

# Standard Library
import dataclasses
import math
import xml.etree.ElementTree as StdElementTree


SVG_PX_PER_CM = 37.7952755906
SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

DEFAULT_CLONE_WIDTH_CM = 3.0
DEFAULT_MAX_GRID_WIDTH_CM = 10.0
MIN_PARAM_CM = 0.1
MAX_CLONE_WIDTH_CM = math.inf
MAX_GRID_WIDTH_CM = math.inf
MIN_NAME_WIDTH = 0.1
MAX_NAME_WIDTH = 1.0
DEFAULT_NAME_WIDTH = 0.2

DEFAULT_TEMPLATE_WIDTH = 100.0
DEFAULT_TEMPLATE_HEIGHT = 30.0
DEFAULT_TEMPLATE_FONT_SIZE = 20.0
SVG_DEFAULT_FONT_SIZE = 16.0
MAX_FONT_SIZE_FACTOR = 2.0

FONT_SHRINK_STEP = 0.95
MIN_FONT_SIZE = 1.0

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
DEFAULT_FONT_ITALIC = "Helvetica-Oblique"
DEFAULT_FONT_BOLD_ITALIC = "Helvetica-BoldOblique"

DEFAULT_OUTPUT_NAME = "names-grid.svg"
OUTPUT_SUFFIX = "-name-tags.svg"

# notices that stop a build; always printed, even in quiet mode
STRUCTURAL_NOTICES = ("TemplateParseError", "MissingTemplate", "MissingTextNode")

NON_RENDERED_TAGS = {
	"defs",
	"clipPath",
	"mask",
	"symbol",
	"marker",
	"pattern",
	"linearGradient",
	"radialGradient",
	"filter",
	"style",
	"script",
	"metadata",
	"title",
	"desc",
}


@dataclasses.dataclass(frozen=True)
class BoundingBox:
	x: float
	y: float
	width: float
	height: float


@dataclasses.dataclass(frozen=True)
class GridLayout:
	columns: int
	rows: int
	scale: float
	cell_width: float
	cell_height: float
	canvas_width: float
	canvas_height: float


@dataclasses.dataclass
class GridParams:
	clone_width_cm: float | str | None = None
	max_grid_width_cm: float | str | None = None
	max_font_size_cm: float | str | None = None
	max_name_width: float | str | None = None


@dataclasses.dataclass
class Template:
	root: StdElementTree.Element
	width: float
	height: float
	file_name: str | None
	font_size: float


@dataclasses.dataclass
class NormalizedTemplate:
	group: StdElementTree.Element
	bbox: BoundingBox
	width: float
	height: float


@dataclasses.dataclass
class Instance:
	name: str
	index: int
	row: int
	col: int
	x: float
	y: float
	font_size: float


@dataclasses.dataclass
class GridDocument:
	root: StdElementTree.Element
	layout: GridLayout
	instances: list[Instance] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Notice:
	kind: str
	message: str
