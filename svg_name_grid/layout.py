"""
Grid packing arithmetic.
"""

# Standard Library
import math

# local repo modules
import svg_name_grid as sng
import svg_name_grid.config


GridLayout = sng.config.GridLayout


#============================================
def compute_layout(
	instance_count: int,
	desired_cell_width: float,
	template_width: float,
	template_height: float,
	page_width_budget: float,
) -> GridLayout:
	"""
	Compute columns, rows and canvas size for a grid of template copies.

	At least one column is always produced, even when a single cell is
	wider than the page budget. template_width must be positive.

	Args:
		instance_count: Number of cells to place.
		desired_cell_width: Width of one cell in user units.
		template_width: Intrinsic template width.
		template_height: Intrinsic template height.
		page_width_budget: Maximum canvas width.

	Returns:
		GridLayout.
	"""
	scale = desired_cell_width / template_width
	cell_height = template_height * scale
	columns = max(1, math.floor(page_width_budget / desired_cell_width))
	rows = math.ceil(instance_count / columns)
	return GridLayout(
		columns=columns,
		rows=rows,
		scale=scale,
		cell_width=desired_cell_width,
		cell_height=cell_height,
		canvas_width=columns * desired_cell_width,
		canvas_height=rows * cell_height,
	)


#============================================
def cell_position(index: int, layout: GridLayout) -> tuple[int, int, float, float]:
	"""
	Locate a cell by its index in row-major order.

	Args:
		index: Instance index.
		layout: Grid layout.

	Returns:
		Tuple of (row, col, x, y).
	"""
	row = index // layout.columns
	col = index % layout.columns
	return (row, col, col * layout.cell_width, row * layout.cell_height)
