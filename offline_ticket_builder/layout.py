"""
Grid pagination of tickets onto fixed-size pages.
"""

# Standard Library
import dataclasses

# local repo modules
import offline_ticket_builder as otb
import offline_ticket_builder.config


LayoutConfig = otb.config.LayoutConfig


@dataclasses.dataclass(frozen=True)
class SlotPlacement:
	index: int
	page_index: int
	slot: int
	row: int
	column: int
	x: int
	y: int


#============================================
def compute_slot(index: int, layout: LayoutConfig) -> SlotPlacement:
	"""
	Compute the page, grid cell and pixel offset for a ticket index.

	Slots fill row-major: left to right, then top to bottom.

	Args:
		index: Zero-based ticket index.
		layout: Layout configuration.

	Returns:
		SlotPlacement.
	"""
	if index < 0:
		raise ValueError(f"ticket index must be non-negative, got {index}")
	per_page = layout.tickets_per_page
	page_index = index // per_page
	slot = index % per_page
	row = slot // layout.columns
	column = slot % layout.columns
	x = column * (layout.ticket_width + layout.margin_x) + layout.margin_x
	y = row * (layout.ticket_height + layout.margin_y) + layout.margin_y
	return SlotPlacement(
		index=index,
		page_index=page_index,
		slot=slot,
		row=row,
		column=column,
		x=x,
		y=y,
	)


#============================================
def count_pages(total: int, layout: LayoutConfig) -> int:
	"""
	Count the pages needed for a number of tickets.

	Args:
		total: Number of tickets.
		layout: Layout configuration.

	Returns:
		Page count.
	"""
	if total <= 0:
		return 0
	per_page = layout.tickets_per_page
	return (total + per_page - 1) // per_page


#============================================
def paginate(items: list, layout: LayoutConfig) -> list[list[tuple[object, SlotPlacement]]]:
	"""
	Group items by page with their placements.

	Args:
		items: Ordered items, one per slot.
		layout: Layout configuration.

	Returns:
		One list of (item, placement) per page, in page order.
	"""
	pages: list[list[tuple[object, SlotPlacement]]] = [[] for _ in range(count_pages(len(items), layout))]
	for index, item in enumerate(items):
		placement = compute_slot(index, layout)
		pages[placement.page_index].append((item, placement))
	return pages
