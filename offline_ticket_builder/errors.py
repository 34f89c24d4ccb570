"""
Error types raised by the ticket pipeline.
"""


class TicketBuildError(Exception):
	"""
	Base error carrying a machine readable code and diagnostic details.
	"""

	code = "ticket_build_failed"

	def __init__(self, message: str, code: str | None = None, details: dict | None = None):
		super().__init__(message)
		self.message = message
		if code is not None:
			self.code = code
		self.details = dict(details or {})

	def to_dict(self) -> dict:
		return {
			"code": self.code,
			"message": self.message,
			"details": dict(self.details),
		}


class ValidationError(TicketBuildError):
	"""
	Rejected input; no generation work was done.
	"""

	code = "invalid_request"


class CodeGenerationError(TicketBuildError):
	code = "code_generation_failed"

	def __init__(self, token: str, reason: str):
		super().__init__(
			f"Failed to generate code for token {token!r}: {reason}",
			details={"token": token, "reason": reason},
		)
		self.token = token


class DocumentAssemblyError(TicketBuildError):
	"""
	Page or document rendering failed. Triggers the archive fallback.
	"""

	code = "document_assembly_failed"


class ArchiveError(TicketBuildError):
	code = "archive_failed"


class OutputError(TicketBuildError):
	"""
	Both the document and the archive output failed.
	"""

	code = "output_failed"

	def __init__(self, document_error: DocumentAssemblyError, archive_error: ArchiveError):
		super().__init__(
			"Failed to generate both document and archive",
			details={
				"document_error": document_error.message,
				"archive_error": archive_error.message,
			},
		)
		self.document_error = document_error
		self.archive_error = archive_error
