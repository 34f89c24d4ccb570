"""
Batch orchestration: validation, ticket rendering and output with fallback.
"""

# Standard Library
import dataclasses

# local repo modules
import offline_ticket_builder as otb
import offline_ticket_builder.archive
import offline_ticket_builder.compose
import offline_ticket_builder.config
import offline_ticket_builder.document
import offline_ticket_builder.errors
import offline_ticket_builder.geometry


LayoutConfig = otb.config.LayoutConfig
CodeConfig = otb.config.CodeConfig
BatchConfig = otb.config.BatchConfig
Participant = otb.compose.Participant
TicketImage = otb.compose.TicketImage
CodeRect = otb.geometry.CodeRect
ScaledRect = otb.geometry.ScaledRect
TicketBuildError = otb.errors.TicketBuildError
ValidationError = otb.errors.ValidationError
DocumentAssemblyError = otb.errors.DocumentAssemblyError
ArchiveError = otb.errors.ArchiveError
OutputError = otb.errors.OutputError

DOCUMENT_CONTENT_TYPE = otb.config.DOCUMENT_CONTENT_TYPE
ARCHIVE_CONTENT_TYPE = otb.config.ARCHIVE_CONTENT_TYPE
OUTPUT_FILENAME_PREFIX = otb.config.OUTPUT_FILENAME_PREFIX


@dataclasses.dataclass(frozen=True)
class TemplateUpload:
	data: bytes
	content_type: str | None = None
	filename: str | None = None


@dataclasses.dataclass(frozen=True)
class OutputArtifact:
	kind: str
	content_type: str
	filename: str
	data: bytes
	ticket_count: int
	pages: int
	scaled_rect: ScaledRect | None = None
	document_error: str | None = None


@dataclasses.dataclass(frozen=True)
class ErrorReport:
	code: str
	message: str
	details: dict

	@classmethod
	def from_error(cls, error: TicketBuildError) -> "ErrorReport":
		return cls(code=error.code, message=error.message, details=dict(error.details))

	def to_dict(self) -> dict:
		return {"code": self.code, "message": self.message, "details": dict(self.details)}


#============================================
def validate_participants(participants: list[Participant], batch_config: BatchConfig) -> None:
	"""
	Check batch size and token uniqueness.

	Args:
		participants: Ordered participants.
		batch_config: Batch limits.
	"""
	count = len(participants)
	if count == 0:
		raise ValidationError("No participants to generate tickets for", code="no_participants")
	if count > batch_config.max_participants:
		raise ValidationError(
			f"Too many tickets, maximum {batch_config.max_participants} per batch",
			code="batch_too_large",
			details={"count": count, "max_participants": batch_config.max_participants},
		)
	seen: set[str] = set()
	for participant in participants:
		if not participant.token:
			raise ValidationError(
				"Participant token is empty",
				code="invalid_participant",
				details={"identifier": participant.identifier},
			)
		if participant.token in seen:
			raise ValidationError(
				f"Duplicate participant token {participant.token!r}",
				code="duplicate_token",
				details={"token": participant.token},
			)
		seen.add(participant.token)


#============================================
def output_filename(event_id: str, extension: str) -> str:
	"""
	Build the download filename for an event.

	Args:
		event_id: Event identifier.
		extension: File extension without the dot.

	Returns:
		Filename string.
	"""
	return f"{OUTPUT_FILENAME_PREFIX}-{event_id}.{extension}"


#============================================
def assemble_output(
	event_id: str,
	tickets: list[TicketImage],
	layout: LayoutConfig,
	workers: int = 1,
	verbose: bool = False,
	scaled_rect: ScaledRect | None = None,
) -> OutputArtifact:
	"""
	Build the PDF, falling back to a zip of ticket images.

	Args:
		event_id: Event identifier for the filename.
		tickets: Tickets in participant order.
		layout: Layout configuration.
		workers: Maximum concurrent page renders.
		verbose: Print diagnostics.
		scaled_rect: Code placement, recorded on the artifact.

	Returns:
		OutputArtifact of kind "document" or "archive".
	"""
	try:
		data, pages = otb.document.assemble_document(tickets, layout, workers=workers, verbose=verbose)
	except DocumentAssemblyError as document_error:
		if verbose:
			print(f"Document assembly failed: {document_error.message}")
			print("Falling back to zip archive")
		try:
			archive_data = otb.archive.assemble_archive(tickets)
		except ArchiveError as archive_error:
			raise OutputError(document_error, archive_error) from archive_error
		if verbose:
			print(f"Archive written: {len(tickets)} entries, {len(archive_data)} bytes")
		return OutputArtifact(
			kind="archive",
			content_type=ARCHIVE_CONTENT_TYPE,
			filename=output_filename(event_id, "zip"),
			data=archive_data,
			ticket_count=len(tickets),
			pages=0,
			scaled_rect=scaled_rect,
			document_error=document_error.message,
		)
	if verbose:
		print(f"Document written: {pages} pages, {len(data)} bytes")
	return OutputArtifact(
		kind="document",
		content_type=DOCUMENT_CONTENT_TYPE,
		filename=output_filename(event_id, "pdf"),
		data=data,
		ticket_count=len(tickets),
		pages=pages,
		scaled_rect=scaled_rect,
	)


#============================================
def generate_offline_tickets(
	event_id: str,
	template: TemplateUpload,
	code_rect: CodeRect,
	participants: list[Participant],
	layout: LayoutConfig | None = None,
	code_config: CodeConfig | None = None,
	batch_config: BatchConfig | None = None,
	verbose: bool = False,
) -> OutputArtifact:
	"""
	Generate printable tickets for one event batch.

	Args:
		event_id: Event identifier.
		template: Uploaded template image.
		code_rect: Code placement in template pixels.
		participants: Ordered participants.
		layout: Layout configuration, defaults to A4 2x5.
		code_config: Code configuration.
		batch_config: Batch limits.
		verbose: Print progress and diagnostics.

	Returns:
		OutputArtifact.
	"""
	if layout is None:
		layout = otb.config.build_layout_config()
	if code_config is None:
		code_config = otb.config.build_code_config()
	if batch_config is None:
		batch_config = otb.config.build_batch_config()

	participants = list(participants)
	otb.compose.check_template_type(template.content_type, template.filename)
	validate_participants(participants, batch_config)
	template_image = otb.compose.load_template(template.data, template.content_type, template.filename)
	otb.geometry.validate_code_rect(code_rect, template_image.width, template_image.height)

	scaled_rect = otb.geometry.scale_code_rect(
		code_rect,
		template_image.width,
		template_image.height,
		layout,
		code_config,
	)
	if verbose:
		print(f"Participants: {len(participants)}")
		print(f"Template: {template_image.width}x{template_image.height}px")
		print(
			f"Code rect: ({scaled_rect.x},{scaled_rect.y},{scaled_rect.width},{scaled_rect.height}) "
			f"scale={scaled_rect.scale:.4f}"
		)
		if layout.overflow != (0, 0):
			print(f"Warning: ticket grid runs past the page edge by {layout.overflow[0]}x{layout.overflow[1]}px")
	ticket_template = otb.compose.resize_template(template_image, layout)
	tickets = otb.compose.render_tickets(
		participants,
		ticket_template,
		scaled_rect,
		code_config,
		batch_config.workers,
		verbose=verbose,
	)
	return assemble_output(
		event_id,
		tickets,
		layout,
		workers=batch_config.workers,
		verbose=verbose,
		scaled_rect=scaled_rect,
	)


#============================================
def handle_request(
	event_id: str,
	template: TemplateUpload,
	code_rect: CodeRect,
	participants: list[Participant],
	layout: LayoutConfig | None = None,
	code_config: CodeConfig | None = None,
	batch_config: BatchConfig | None = None,
	verbose: bool = False,
) -> OutputArtifact | ErrorReport:
	"""
	Run a batch and report failures as a structured error value.

	Returns:
		OutputArtifact on success, ErrorReport otherwise.
	"""
	try:
		return generate_offline_tickets(
			event_id,
			template,
			code_rect,
			participants,
			layout=layout,
			code_config=code_config,
			batch_config=batch_config,
			verbose=verbose,
		)
	except TicketBuildError as error:
		if verbose:
			print(f"Ticket generation failed: {error.message}")
		return ErrorReport.from_error(error)
