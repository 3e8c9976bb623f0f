"""
SVG parsing, transforms and serialization.
"""

# Standard Library
import dataclasses
import math
import re
import xml.etree.ElementTree as StdElementTree

# PIP3 modules
import defusedxml
import defusedxml.ElementTree as ElementTree

# local repo modules
import svg_name_grid as sng
import svg_name_grid.config
import svg_name_grid.errors
import svg_name_grid.units


Template = sng.config.Template
TemplateParseError = sng.errors.TemplateParseError
parse_length = sng.units.parse_length

SVG_NS = sng.config.SVG_NS
XLINK_NS = sng.config.XLINK_NS
NON_RENDERED_TAGS = sng.config.NON_RENDERED_TAGS
DEFAULT_TEMPLATE_WIDTH = sng.config.DEFAULT_TEMPLATE_WIDTH
DEFAULT_TEMPLATE_HEIGHT = sng.config.DEFAULT_TEMPLATE_HEIGHT
DEFAULT_TEMPLATE_FONT_SIZE = sng.config.DEFAULT_TEMPLATE_FONT_SIZE
SVG_DEFAULT_FONT_SIZE = sng.config.SVG_DEFAULT_FONT_SIZE
DEFAULT_FONT_REGULAR = sng.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = sng.config.DEFAULT_FONT_BOLD
DEFAULT_FONT_ITALIC = sng.config.DEFAULT_FONT_ITALIC
DEFAULT_FONT_BOLD_ITALIC = sng.config.DEFAULT_FONT_BOLD_ITALIC

INHERITED_PROPERTIES = (
	"font-size",
	"font-family",
	"font-weight",
	"font-style",
	"text-anchor",
)

IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

TRANSFORM_PATTERN = re.compile(r"([a-zA-Z]+)\s*\(([^)]*)\)")
NUMBER_PATTERN = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

# rendering properties copied from <style> rules into inline styles
STYLESHEET_PROPERTIES = INHERITED_PROPERTIES + ("display",)
CSS_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
CSS_AT_BLOCK_PATTERN = re.compile(r"@[^{};]*\{(?:[^{}]*\{[^{}]*\})*[^{}]*\}|@[^{};]*;")
CSS_RULE_PATTERN = re.compile(r"([^{}]+)\{([^{}]*)\}")
CSS_SELECTOR_PATTERN = re.compile(r"^([a-zA-Z][\w-]*|\*)?((?:[.#][\w-]+)*)$")

StdElementTree.register_namespace("", SVG_NS)
StdElementTree.register_namespace("xlink", XLINK_NS)
StdElementTree.register_namespace("inkscape", "http://www.inkscape.org/namespaces/inkscape")
StdElementTree.register_namespace("sodipodi", "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd")


@dataclasses.dataclass
class TextTarget:
	element: StdElementTree.Element
	matrix: tuple[float, float, float, float, float, float]
	properties: dict[str, str]


#============================================
def svg_tag(name: str) -> str:
	"""
	Build a namespaced SVG tag.
	"""
	return f"{{{SVG_NS}}}{name}"


#============================================
def local_name(tag: object) -> str:
	"""
	Strip the namespace from an XML tag.

	Args:
		tag: Element tag; comments and processing instructions are not strings.

	Returns:
		Local tag name or empty string.
	"""
	if not isinstance(tag, str):
		return ""
	if tag.startswith("{") and "}" in tag:
		return tag.split("}", 1)[1]
	return tag


#============================================
def qualify_tags(root: StdElementTree.Element) -> None:
	"""
	Put unqualified elements into the SVG namespace.

	Templates saved without an xmlns declaration would otherwise mix
	namespaces with the generated output document.
	"""
	for element in root.iter():
		if isinstance(element.tag, str) and not element.tag.startswith("{"):
			element.tag = svg_tag(element.tag)


#============================================
def format_number(value: float) -> str:
	"""
	Format a number for SVG attributes without float noise.

	Args:
		value: Number to format.

	Returns:
		Compact decimal string.
	"""
	text = f"{value:.6f}".rstrip("0").rstrip(".")
	if text in ("-0", ""):
		return "0"
	return text


#============================================
def parse_numbers(text: str | None) -> list[float]:
	"""
	Parse a whitespace or comma separated number list.
	"""
	if not text:
		return []
	return [float(token) for token in NUMBER_PATTERN.findall(text)]


#============================================
def parse_style(style: str | None) -> dict[str, str]:
	"""
	Parse an inline CSS style attribute.

	Args:
		style: Style string like "font-size:12px;fill:#000".

	Returns:
		Dict of property to value.
	"""
	result: dict[str, str] = {}
	if not style:
		return result
	for declaration in style.split(";"):
		if ":" not in declaration:
			continue
		key, value = declaration.split(":", 1)
		key = key.strip()
		if key:
			result[key] = value.strip()
	return result


#============================================
def format_style(properties: dict[str, str]) -> str:
	"""
	Serialize style properties back into an inline style string.
	"""
	return ";".join(f"{key}:{value}" for key, value in properties.items())


#============================================
def presentation_properties(element: StdElementTree.Element) -> dict[str, str]:
	"""
	Collect inheritable presentation properties set on an element.

	Inline style declarations override presentation attributes.
	"""
	properties: dict[str, str] = {}
	for name in INHERITED_PROPERTIES:
		value = element.get(name)
		if value is not None:
			properties[name] = value
	style = parse_style(element.get("style"))
	for name in INHERITED_PROPERTIES:
		if name in style:
			properties[name] = style[name]
	return properties


#============================================
def inherit_properties(
	inherited: dict[str, str] | None,
	element: StdElementTree.Element,
) -> dict[str, str]:
	"""
	Merge an element's own presentation properties over inherited ones.
	"""
	merged = dict(inherited or {})
	merged.update(presentation_properties(element))
	return merged


#============================================
def is_hidden(element: StdElementTree.Element) -> bool:
	"""
	Check whether an element is excluded from rendering.
	"""
	if local_name(element.tag) in NON_RENDERED_TAGS:
		return True
	display = element.get("display")
	style_display = parse_style(element.get("style")).get("display")
	if style_display is not None:
		display = style_display
	return display is not None and display.strip() == "none"


#============================================
def multiply(
	first: tuple[float, float, float, float, float, float],
	second: tuple[float, float, float, float, float, float],
) -> tuple[float, float, float, float, float, float]:
	"""
	Compose two affine matrices; second is applied before first.

	Args:
		first: Outer matrix (a, b, c, d, e, f).
		second: Inner matrix (a, b, c, d, e, f).

	Returns:
		Composed matrix.
	"""
	a1, b1, c1, d1, e1, f1 = first
	a2, b2, c2, d2, e2, f2 = second
	return (
		a1 * a2 + c1 * b2,
		b1 * a2 + d1 * b2,
		a1 * c2 + c1 * d2,
		b1 * c2 + d1 * d2,
		a1 * e2 + c1 * f2 + e1,
		b1 * e2 + d1 * f2 + f1,
	)


#============================================
def apply_matrix(
	matrix: tuple[float, float, float, float, float, float],
	x: float,
	y: float,
) -> tuple[float, float]:
	"""
	Map a point through an affine matrix.
	"""
	a, b, c, d, e, f = matrix
	return (a * x + c * y + e, b * x + d * y + f)


#============================================
def matrix_x_scale(matrix: tuple[float, float, float, float, float, float]) -> float:
	"""
	Length of the transformed unit x vector.
	"""
	return math.hypot(matrix[0], matrix[1])


#============================================
def parse_transform(text: str | None) -> tuple[float, float, float, float, float, float]:
	"""
	Parse an SVG transform attribute into a single affine matrix.

	Args:
		text: Transform list like "translate(10,5) scale(2)".

	Returns:
		Matrix (a, b, c, d, e, f); identity for empty or unknown input.
	"""
	matrix = IDENTITY
	if not text:
		return matrix
	for name, raw_args in TRANSFORM_PATTERN.findall(text):
		args = parse_numbers(raw_args)
		name = name.strip()
		step = IDENTITY
		if name == "matrix" and len(args) == 6:
			step = (args[0], args[1], args[2], args[3], args[4], args[5])
		elif name == "translate" and args:
			ty = args[1] if len(args) > 1 else 0.0
			step = (1.0, 0.0, 0.0, 1.0, args[0], ty)
		elif name == "scale" and args:
			sy = args[1] if len(args) > 1 else args[0]
			step = (args[0], 0.0, 0.0, sy, 0.0, 0.0)
		elif name == "rotate" and args:
			angle = math.radians(args[0])
			cos_a = math.cos(angle)
			sin_a = math.sin(angle)
			step = (cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0)
			if len(args) >= 3:
				cx, cy = args[1], args[2]
				step = multiply((1.0, 0.0, 0.0, 1.0, cx, cy), step)
				step = multiply(step, (1.0, 0.0, 0.0, 1.0, -cx, -cy))
		elif name == "skewX" and args:
			step = (1.0, 0.0, math.tan(math.radians(args[0])), 1.0, 0.0, 0.0)
		elif name == "skewY" and args:
			step = (1.0, math.tan(math.radians(args[0])), 0.0, 1.0, 0.0, 0.0)
		matrix = multiply(matrix, step)
	return matrix


#============================================
def map_font_name(properties: dict[str, str]) -> str:
	"""
	Map SVG font properties to a built-in PDF font for metrics.

	Args:
		properties: Resolved presentation properties.

	Returns:
		ReportLab font name.
	"""
	weight = properties.get("font-weight", "normal").strip().lower()
	if weight in ("bold", "bolder"):
		is_bold = True
	elif weight.isdigit():
		is_bold = int(weight) >= 600
	else:
		is_bold = False
	italic = properties.get("font-style", "normal").strip().lower() in ("italic", "oblique")
	if italic and is_bold:
		return DEFAULT_FONT_BOLD_ITALIC
	if italic:
		return DEFAULT_FONT_ITALIC
	if is_bold:
		return DEFAULT_FONT_BOLD
	return DEFAULT_FONT_REGULAR


#============================================
def resolve_font_size(properties: dict[str, str]) -> float:
	"""
	Resolve a font size in user units from presentation properties.
	"""
	return parse_length(properties.get("font-size"), SVG_DEFAULT_FONT_SIZE, SVG_DEFAULT_FONT_SIZE)


#============================================
def find_text_target(
	element: StdElementTree.Element,
	matrix: tuple[float, float, float, float, float, float] = IDENTITY,
	inherited: dict[str, str] | None = None,
) -> TextTarget | None:
	"""
	Find the first rendered text element in document order.

	The matrix maps the text element's local coordinates into the space
	of the element passed in, including that element's own transform.

	Args:
		element: Subtree root to search.
		matrix: Matrix accumulated above the subtree root.
		inherited: Properties inherited from above the subtree root.

	Returns:
		TextTarget or None when the subtree has no text.
	"""
	if is_hidden(element):
		return None
	current = multiply(matrix, parse_transform(element.get("transform")))
	properties = inherit_properties(inherited, element)
	if local_name(element.tag) == "text":
		return TextTarget(element=element, matrix=current, properties=properties)
	for child in list(element):
		found = find_text_target(child, current, properties)
		if found is not None:
			return found
	return None


#============================================
def set_text_content(element: StdElementTree.Element, text: str) -> None:
	"""
	Replace all content of a text element with a plain string.

	Child tspans are removed, matching DOM textContent assignment.
	"""
	for child in list(element):
		element.remove(child)
	element.text = text


#============================================
def set_font_size(element: StdElementTree.Element, font_size: float) -> None:
	"""
	Set the font size on an element as an inline style.

	Inline style outranks stylesheet rules and presentation attributes;
	the attribute is kept in sync for tools that only read attributes.
	"""
	value = format_number(font_size)
	element.set("font-size", value)
	style = parse_style(element.get("style"))
	style["font-size"] = f"{value}px"
	element.set("style", format_style(style))


#============================================
def parse_stylesheet(text: str) -> list[tuple[str, dict[str, str]]]:
	"""
	Parse simple CSS rules from a style element.

	Only plain rule blocks are read; at-rules such as @media are not
	evaluated and their nested rules are skipped.

	Args:
		text: Stylesheet text.

	Returns:
		List of (selector, declarations) in source order, one entry per
		comma separated selector.
	"""
	text = CSS_COMMENT_PATTERN.sub("", text)
	text = CSS_AT_BLOCK_PATTERN.sub("", text)
	rules: list[tuple[str, dict[str, str]]] = []
	for selectors, body in CSS_RULE_PATTERN.findall(text):
		declarations = parse_style(body)
		for selector in selectors.split(","):
			selector = selector.strip()
			if selector:
				rules.append((selector, declarations))
	return rules


#============================================
def selector_specificity(selector: str) -> tuple[int, int, int] | None:
	"""
	Specificity of a compound selector like "text.cls-1" or "#name".

	Returns:
		Tuple of (ids, classes, tags), or None for unsupported selectors.
	"""
	match = CSS_SELECTOR_PATTERN.match(selector)
	if match is None:
		return None
	tag, qualifiers = match.group(1), match.group(2)
	ids = qualifiers.count("#")
	classes = qualifiers.count(".")
	tags = 1 if tag and tag != "*" else 0
	return (ids, classes, tags)


#============================================
def selector_matches(element: StdElementTree.Element, selector: str) -> bool:
	"""
	Check a compound selector against one element.
	"""
	match = CSS_SELECTOR_PATTERN.match(selector)
	if match is None:
		return False
	tag, qualifiers = match.group(1), match.group(2)
	if tag and tag != "*" and local_name(element.tag) != tag:
		return False
	classes = set((element.get("class") or "").split())
	for prefix, name in re.findall(r"([.#])([\w-]+)", qualifiers):
		if prefix == "." and name not in classes:
			return False
		if prefix == "#" and element.get("id") != name:
			return False
	return True


#============================================
def apply_stylesheets(root: StdElementTree.Element) -> None:
	"""
	Fold style element rules into inline styles.

	Rendering properties from matching rules are written into each
	element's style attribute in specificity order; declarations already
	inline keep precedence, as in the CSS cascade.

	Args:
		root: Template root element.
	"""
	rules: list[tuple[tuple[int, int, int], int, str, dict[str, str]]] = []
	for style_element in root.iter(svg_tag("style")):
		for selector, declarations in parse_stylesheet("".join(style_element.itertext())):
			specificity = selector_specificity(selector)
			if specificity is not None:
				rules.append((specificity, len(rules), selector, declarations))
	if not rules:
		return
	rules.sort(key=lambda rule: (rule[0], rule[1]))
	for element in root.iter():
		if not isinstance(element.tag, str) or local_name(element.tag) in NON_RENDERED_TAGS:
			continue
		cascaded: dict[str, str] = {}
		for _specificity, _order, selector, declarations in rules:
			if not selector_matches(element, selector):
				continue
			for name in STYLESHEET_PROPERTIES:
				if name in declarations:
					cascaded[name] = declarations[name].replace("!important", "").strip()
		if not cascaded:
			continue
		inline = parse_style(element.get("style"))
		cascaded.update(inline)
		element.set("style", format_style(cascaded))


#============================================
def read_template_size(root: StdElementTree.Element) -> tuple[float, float]:
	"""
	Read the intrinsic template size in user units.

	The viewBox defines the coordinate space of the children, so it wins
	over width and height; those are the fallback, then fixed defaults.

	Args:
		root: Template root element.

	Returns:
		Tuple of (width, height).
	"""
	view_box = parse_numbers(root.get("viewBox"))
	if len(view_box) == 4 and view_box[2] > 0 and view_box[3] > 0:
		return (view_box[2], view_box[3])
	width = parse_length(root.get("width"), DEFAULT_TEMPLATE_WIDTH)
	height = parse_length(root.get("height"), DEFAULT_TEMPLATE_HEIGHT)
	if width <= 0:
		width = DEFAULT_TEMPLATE_WIDTH
	if height <= 0:
		height = DEFAULT_TEMPLATE_HEIGHT
	return (width, height)


#============================================
def parse_template(data: bytes | str, file_name: str | None = None) -> Template:
	"""
	Parse an uploaded SVG template.

	Args:
		data: SVG document bytes or text.
		file_name: Original upload file name.

	Returns:
		Template.
	"""
	try:
		root = ElementTree.fromstring(data)
	except (StdElementTree.ParseError, defusedxml.DefusedXmlException) as error:
		raise TemplateParseError(f"Could not parse SVG template: {error}") from error
	if local_name(root.tag) != "svg":
		raise TemplateParseError(f"Template root is <{local_name(root.tag)}>, expected <svg>")
	qualify_tags(root)
	apply_stylesheets(root)
	width, height = read_template_size(root)

	font_size = DEFAULT_TEMPLATE_FONT_SIZE
	target = find_text_target(root)
	if target is not None and "font-size" in target.properties:
		font_size = parse_length(target.properties["font-size"], DEFAULT_TEMPLATE_FONT_SIZE)
		if font_size <= 0:
			font_size = DEFAULT_TEMPLATE_FONT_SIZE

	return Template(
		root=root,
		width=width,
		height=height,
		file_name=file_name,
		font_size=font_size,
	)


#============================================
def new_svg_root(width: float, height: float) -> StdElementTree.Element:
	"""
	Create an output SVG root sized to the canvas.
	"""
	root = StdElementTree.Element(svg_tag("svg"))
	root.set("width", format_number(width))
	root.set("height", format_number(height))
	root.set("viewBox", f"0 0 {format_number(width)} {format_number(height)}")
	return root


#============================================
def serialize(root: StdElementTree.Element) -> bytes:
	"""
	Serialize an SVG element tree to UTF-8 bytes with an XML declaration.
	"""
	return StdElementTree.tostring(root, encoding="utf-8", xml_declaration=True)
