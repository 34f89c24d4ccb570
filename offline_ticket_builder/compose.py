"""
Template intake and per-participant ticket compositing.
"""

# Standard Library
import concurrent.futures
import dataclasses
import io
import pathlib

# PIP3 modules
import PIL.Image

# local repo modules
import offline_ticket_builder as otb
import offline_ticket_builder.codes
import offline_ticket_builder.config
import offline_ticket_builder.errors
import offline_ticket_builder.geometry


LayoutConfig = otb.config.LayoutConfig
CodeConfig = otb.config.CodeConfig
ScaledRect = otb.geometry.ScaledRect
ValidationError = otb.errors.ValidationError
CodeGenerationError = otb.errors.CodeGenerationError

BACKGROUND_COLOR = otb.config.BACKGROUND_COLOR
PROGRESS_BAR_WIDTH = otb.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = otb.config.PROGRESS_UPDATE_EVERY

IMAGE_CONTENT_TYPES = ("image/png", "image/jpeg")
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")


@dataclasses.dataclass(frozen=True)
class Participant:
	identifier: str
	token: str


@dataclasses.dataclass(frozen=True)
class TicketImage:
	index: int
	identifier: str
	token: str
	data: bytes


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def is_image_file(content_type: str | None, filename: str | None) -> bool:
	"""
	Check the declared type or extension for PNG or JPEG.

	Args:
		content_type: Declared MIME type.
		filename: Uploaded file name.

	Returns:
		True for PNG or JPEG uploads.
	"""
	if content_type and content_type.lower() in IMAGE_CONTENT_TYPES:
		return True
	if filename and pathlib.PurePath(filename).suffix.lower() in IMAGE_EXTENSIONS:
		return True
	return False


#============================================
def flatten_image(image: PIL.Image.Image) -> PIL.Image.Image:
	"""
	Convert any decoded image to an opaque RGB raster on white.

	Args:
		image: Decoded PIL image.

	Returns:
		RGB PIL image.
	"""
	has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
	if not has_alpha:
		return image.convert("RGB")
	rgba = image.convert("RGBA")
	flat = PIL.Image.new("RGB", rgba.size, BACKGROUND_COLOR)
	flat.paste(rgba, (0, 0), rgba)
	return flat


#============================================
def check_template_type(content_type: str | None, filename: str | None) -> None:
	"""
	Reject uploads that are not declared as PNG or JPEG.

	Args:
		content_type: Declared MIME type.
		filename: Uploaded file name.
	"""
	if not is_image_file(content_type, filename):
		raise ValidationError(
			"Template file must be PNG or JPG",
			code="invalid_template",
			details={"content_type": content_type, "filename": filename},
		)


#============================================
def load_template(data: bytes, content_type: str | None, filename: str | None) -> PIL.Image.Image:
	"""
	Decode an uploaded template into a single RGB raster.

	Headers declaring more than PIL.Image.MAX_IMAGE_PIXELS are rejected
	before the pixel data is decoded.

	Args:
		data: Uploaded bytes.
		content_type: Declared MIME type.
		filename: Uploaded file name.

	Returns:
		RGB PIL image.
	"""
	check_template_type(content_type, filename)
	details = {"content_type": content_type, "filename": filename}
	try:
		image = PIL.Image.open(io.BytesIO(data))
		max_pixels = PIL.Image.MAX_IMAGE_PIXELS
		if max_pixels is not None and image.width * image.height > max_pixels:
			raise PIL.Image.DecompressionBombError(
				f"Image size ({image.width}x{image.height}) exceeds limit of {max_pixels} pixels"
			)
		image.load()
	except (PIL.UnidentifiedImageError, PIL.Image.DecompressionBombError, OSError) as error:
		details["reason"] = str(error)
		raise ValidationError(
			"Template file could not be decoded",
			code="invalid_template",
			details=details,
		) from error
	if image.width <= 0 or image.height <= 0:
		raise ValidationError("Template image is empty", code="invalid_template", details=details)
	return flatten_image(image)


#============================================
def resize_template(template: PIL.Image.Image, layout: LayoutConfig) -> PIL.Image.Image:
	"""
	Contain-fit the template into the ticket canvas.

	The resized template is anchored at the top-left corner so template
	coordinates times the scale land on the same content.

	Args:
		template: RGB template image.
		layout: Layout configuration.

	Returns:
		RGB image of ticket size.
	"""
	scale = otb.geometry.compute_scale(template.width, template.height, layout)
	width = min(layout.ticket_width, max(1, otb.geometry.round_half_up(template.width * scale)))
	height = min(layout.ticket_height, max(1, otb.geometry.round_half_up(template.height * scale)))
	resized = template.resize((width, height), PIL.Image.Resampling.LANCZOS)
	canvas = PIL.Image.new("RGB", (layout.ticket_width, layout.ticket_height), BACKGROUND_COLOR)
	canvas.paste(resized, (0, 0))
	return canvas


#============================================
def composite_ticket(
	template: PIL.Image.Image,
	code_image: PIL.Image.Image,
	rect: ScaledRect,
) -> PIL.Image.Image:
	"""
	Overlay a code image onto a copy of the ticket template.

	Args:
		template: Ticket-sized template, left untouched.
		code_image: Code image sized to the rect.
		rect: Placement in ticket pixels.

	Returns:
		New RGB ticket image.
	"""
	ticket = template.copy()
	ticket.paste(code_image, (rect.x, rect.y))
	return ticket


#============================================
def encode_png(image: PIL.Image.Image) -> bytes:
	"""
	Encode an image as PNG bytes.

	Args:
		image: PIL image.

	Returns:
		PNG bytes.
	"""
	buffer = io.BytesIO()
	image.save(buffer, format="PNG")
	return buffer.getvalue()


#============================================
def render_ticket(
	index: int,
	participant: Participant,
	template: PIL.Image.Image,
	rect: ScaledRect,
	code_config: CodeConfig,
) -> TicketImage:
	"""
	Render one finished ticket for a participant.

	Args:
		index: Position of the participant in the batch.
		participant: Participant entry.
		template: Ticket-sized template shared read-only.
		rect: Scaled code placement.
		code_config: Code configuration.

	Returns:
		TicketImage with PNG bytes.
	"""
	code_image = otb.codes.render_code_image(participant.token, rect.width, rect.height, code_config)
	try:
		ticket = composite_ticket(template, code_image, rect)
		data = encode_png(ticket)
	except (OSError, ValueError) as error:
		raise CodeGenerationError(participant.token, str(error)) from error
	return TicketImage(
		index=index,
		identifier=participant.identifier,
		token=participant.token,
		data=data,
	)


#============================================
def render_tickets(
	participants: list[Participant],
	template: PIL.Image.Image,
	rect: ScaledRect,
	code_config: CodeConfig,
	workers: int,
	verbose: bool = False,
) -> list[TicketImage]:
	"""
	Render tickets for all participants on a bounded worker pool.

	The first failure in participant order aborts the batch; queued work is
	cancelled and nothing partial is returned.

	Args:
		participants: Ordered participants.
		template: Ticket-sized template.
		rect: Scaled code placement.
		code_config: Code configuration.
		workers: Maximum concurrent renders.
		verbose: Print progress.

	Returns:
		Tickets in participant order.
	"""
	total = len(participants)
	tickets: list[TicketImage] = []
	if verbose and total > 0:
		print_progress("Tickets", 0, total)
	with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
		futures = [
			executor.submit(render_ticket, index, participant, template, rect, code_config)
			for index, participant in enumerate(participants)
		]
		try:
			for count, future in enumerate(futures, start=1):
				tickets.append(future.result())
				if verbose and (count % PROGRESS_UPDATE_EVERY == 0 or count == total):
					print_progress("Tickets", count, total)
		except CodeGenerationError:
			for future in futures:
				future.cancel()
			if verbose:
				print()
			raise
	if verbose and total > 0:
		print()
	return tickets
