"""
Shared configuration and constants.
"""

import dataclasses


POINTS_PER_INCH = 72.0

# A4 at 300 dpi
PAGE_WIDTH = 2480
PAGE_HEIGHT = 3508
PAGE_DPI = 300

TICKET_WIDTH = 1200
TICKET_HEIGHT = 680
COLUMNS = 2
ROWS = 5
MARGIN_X = 40
MARGIN_Y = 40

MIN_CODE_WIDTH = 100
MIN_CODE_HEIGHT = 50
DEFAULT_ERROR_CORRECTION = "H"
DEFAULT_REGISTER_URL = "http://10.10.11.28:3000/register?token={token}"

MAX_PARTICIPANTS = 1000
DEFAULT_WORKERS = 4

PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

BACKGROUND_COLOR = (255, 255, 255)
CODE_DARK_COLOR = "#000000"
CODE_LIGHT_COLOR = "#FFFFFF"

DOCUMENT_CONTENT_TYPE = "application/pdf"
ARCHIVE_CONTENT_TYPE = "application/zip"
OUTPUT_FILENAME_PREFIX = "offline-tickets"


@dataclasses.dataclass(frozen=True)
class LayoutConfig:
	page_width: int
	page_height: int
	ticket_width: int
	ticket_height: int
	columns: int
	rows: int
	margin_x: int
	margin_y: int
	dpi: int

	def __post_init__(self) -> None:
		if self.columns <= 0 or self.rows <= 0:
			raise ValueError("columns and rows must be positive")
		if self.ticket_width <= 0 or self.ticket_height <= 0:
			raise ValueError("ticket size must be positive")
		if self.dpi <= 0:
			raise ValueError("dpi must be positive")
		# the last slot must start on the page; it may run past the edge
		last_x = (self.columns - 1) * (self.ticket_width + self.margin_x) + self.margin_x
		last_y = (self.rows - 1) * (self.ticket_height + self.margin_y) + self.margin_y
		if last_x >= self.page_width or last_y >= self.page_height:
			raise ValueError(
				f"grid of {self.columns}x{self.rows} tickets does not fit page "
				f"{self.page_width}x{self.page_height}px"
			)

	@property
	def tickets_per_page(self) -> int:
		return self.columns * self.rows

	@property
	def grid_extent(self) -> tuple[int, int]:
		"""
		Right and bottom edge of the last ticket slot in page pixels.
		"""
		width = self.columns * (self.ticket_width + self.margin_x)
		height = self.rows * (self.ticket_height + self.margin_y)
		return (width, height)

	@property
	def overflow(self) -> tuple[int, int]:
		"""
		Pixels of the grid that fall past the right and bottom page edges.
		"""
		extent_width, extent_height = self.grid_extent
		return (max(0, extent_width - self.page_width), max(0, extent_height - self.page_height))


@dataclasses.dataclass(frozen=True)
class CodeConfig:
	url_template: str
	error_correction: str
	min_width: int
	min_height: int


@dataclasses.dataclass(frozen=True)
class BatchConfig:
	max_participants: int
	workers: int


#============================================
def build_layout_config() -> LayoutConfig:
	"""
	Build the default A4 layout of two columns by five rows.

	Returns:
		LayoutConfig.
	"""
	return LayoutConfig(
		page_width=PAGE_WIDTH,
		page_height=PAGE_HEIGHT,
		ticket_width=TICKET_WIDTH,
		ticket_height=TICKET_HEIGHT,
		columns=COLUMNS,
		rows=ROWS,
		margin_x=MARGIN_X,
		margin_y=MARGIN_Y,
		dpi=PAGE_DPI,
	)


#============================================
def build_code_config(url_template: str | None = None) -> CodeConfig:
	"""
	Build the default code configuration.

	Args:
		url_template: Optional URL template with a {token} placeholder.

	Returns:
		CodeConfig.
	"""
	if url_template is None:
		url_template = DEFAULT_REGISTER_URL
	if "{token}" not in url_template:
		raise ValueError("url template must contain a {token} placeholder")
	return CodeConfig(
		url_template=url_template,
		error_correction=DEFAULT_ERROR_CORRECTION,
		min_width=MIN_CODE_WIDTH,
		min_height=MIN_CODE_HEIGHT,
	)


#============================================
def build_batch_config(workers: int | None = None) -> BatchConfig:
	"""
	Build the default batch limits.

	Args:
		workers: Optional worker count override.

	Returns:
		BatchConfig.
	"""
	if workers is None:
		workers = DEFAULT_WORKERS
	if workers < 1:
		raise ValueError("workers must be at least 1")
	return BatchConfig(max_participants=MAX_PARTICIPANTS, workers=workers)


#============================================
def pixels_to_points(value: float, dpi: int) -> float:
	"""
	Convert pixels at a given resolution to PDF points.

	Args:
		value: Pixel value.
		dpi: Pixels per inch.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_INCH / dpi
