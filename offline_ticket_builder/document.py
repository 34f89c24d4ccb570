"""
Page rendering and multi-page PDF assembly.
"""

# Standard Library
import concurrent.futures
import io

# PIP3 modules
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import offline_ticket_builder as otb
import offline_ticket_builder.compose
import offline_ticket_builder.config
import offline_ticket_builder.errors
import offline_ticket_builder.layout


LayoutConfig = otb.config.LayoutConfig
TicketImage = otb.compose.TicketImage
SlotPlacement = otb.layout.SlotPlacement
DocumentAssemblyError = otb.errors.DocumentAssemblyError

BACKGROUND_COLOR = otb.config.BACKGROUND_COLOR


#============================================
def render_page_image(
	entries: list[tuple[TicketImage, SlotPlacement]],
	layout: LayoutConfig,
) -> PIL.Image.Image:
	"""
	Draw tickets onto a blank white page canvas.

	Args:
		entries: Tickets with their placements on this page.
		layout: Layout configuration.

	Returns:
		RGB page image.
	"""
	page = PIL.Image.new("RGB", (layout.page_width, layout.page_height), BACKGROUND_COLOR)
	ticket_size = (layout.ticket_width, layout.ticket_height)
	for ticket, placement in entries:
		with PIL.Image.open(io.BytesIO(ticket.data)) as image:
			ticket_image = image.convert("RGB")
		if ticket_image.size != ticket_size:
			ticket_image = ticket_image.resize(ticket_size, PIL.Image.Resampling.LANCZOS)
		page.paste(ticket_image, (placement.x, placement.y))
	return page


#============================================
def render_page_pdf(page_image: PIL.Image.Image, layout: LayoutConfig) -> bytes:
	"""
	Wrap a page raster in a single-page PDF.

	Args:
		page_image: RGB page image.
		layout: Layout configuration.

	Returns:
		PDF bytes.
	"""
	page_width = otb.config.pixels_to_points(layout.page_width, layout.dpi)
	page_height = otb.config.pixels_to_points(layout.page_height, layout.dpi)
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page_width, page_height))
	image_reader = reportlab.lib.utils.ImageReader(page_image)
	pdf.drawImage(image_reader, 0, 0, width=page_width, height=page_height)
	pdf.showPage()
	pdf.save()
	return buffer.getvalue()


#============================================
def render_page(
	entries: list[tuple[TicketImage, SlotPlacement]],
	layout: LayoutConfig,
) -> bytes:
	"""
	Render one page of tickets to single-page PDF bytes.

	Args:
		entries: Tickets with their placements on this page.
		layout: Layout configuration.

	Returns:
		PDF bytes.
	"""
	page_image = render_page_image(entries, layout)
	return render_page_pdf(page_image, layout)


#============================================
def merge_pages(page_pdfs: list[bytes]) -> bytes:
	"""
	Concatenate single-page PDFs in order.

	Args:
		page_pdfs: PDF bytes per page, in page order.

	Returns:
		Merged PDF bytes.
	"""
	writer = pypdf.PdfWriter()
	for page_pdf in page_pdfs:
		reader = pypdf.PdfReader(io.BytesIO(page_pdf))
		writer.add_page(reader.pages[0])
	buffer = io.BytesIO()
	writer.write(buffer)
	return buffer.getvalue()


#============================================
def assemble_document(
	tickets: list[TicketImage],
	layout: LayoutConfig,
	workers: int = 1,
	verbose: bool = False,
) -> tuple[bytes, int]:
	"""
	Lay out tickets on pages and build a multi-page PDF.

	Pages render independently on a bounded pool and are merged by page
	index. Any rendering failure is raised as DocumentAssemblyError.

	Args:
		tickets: Tickets in participant order.
		layout: Layout configuration.
		workers: Maximum concurrent page renders.
		verbose: Print progress.

	Returns:
		Tuple of (PDF bytes, page count).
	"""
	pages = otb.layout.paginate(tickets, layout)
	if not pages:
		raise DocumentAssemblyError("No tickets to place on pages")
	total = len(pages)
	try:
		with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
			page_pdfs = []
			for count, page_pdf in enumerate(executor.map(render_page, pages, [layout] * total), start=1):
				page_pdfs.append(page_pdf)
				if verbose:
					otb.compose.print_progress("Pages", count, total)
		if verbose:
			print()
		document = merge_pages(page_pdfs)
	except Exception as error:  # noqa: BLE001
		raise DocumentAssemblyError(
			f"Failed to render document: {error}",
			details={"reason": str(error), "error_type": type(error).__name__},
		) from error
	return document, total
