"""
Zip archive of raw ticket images, used when the PDF cannot be built.
"""

# Standard Library
import hashlib
import io
import re
import zipfile

# local repo modules
import offline_ticket_builder as otb
import offline_ticket_builder.compose
import offline_ticket_builder.errors


TicketImage = otb.compose.TicketImage
ArchiveError = otb.errors.ArchiveError

SAFE_TOKEN_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


#============================================
def sanitize_token(value: str) -> str:
	"""
	Sanitize a string for filenames.

	Args:
		value: Input string.

	Returns:
		Sanitized string.
	"""
	result: list[str] = []
	for char in value:
		if char.isascii() and char.isalnum():
			result.append(char)
		else:
			result.append("_")
	sanitized = "".join(result).strip("_")
	if not sanitized:
		return "ticket"
	return sanitized


#============================================
def ticket_entry_name(token: str) -> str:
	"""
	Build the archive entry name for a token.

	Unsafe tokens are sanitized and get a "~<hash>" suffix. Safe tokens
	cannot contain "~", so the two forms never collide.

	Args:
		token: Participant token.

	Returns:
		Entry name like "ticket-<token>.png".
	"""
	if SAFE_TOKEN_PATTERN.fullmatch(token) and token not in (".", ".."):
		return f"ticket-{token}.png"
	digest = hashlib.sha256(token.encode("utf-8")).hexdigest()[:8]
	return f"ticket-{sanitize_token(token)}~{digest}.png"


#============================================
def assemble_archive(tickets: list[TicketImage]) -> bytes:
	"""
	Package ticket images into a deflated zip archive.

	Args:
		tickets: Tickets in participant order.

	Returns:
		Zip bytes with one entry per ticket.
	"""
	buffer = io.BytesIO()
	try:
		with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
			seen: set[str] = set()
			for ticket in tickets:
				name = ticket_entry_name(ticket.token)
				if name in seen:
					raise ArchiveError(
						f"Duplicate archive entry {name}",
						details={"entry": name, "token": ticket.token},
					)
				seen.add(name)
				archive.writestr(name, ticket.data)
	except (OSError, ValueError, zipfile.LargeZipFile) as error:
		raise ArchiveError(
			f"Failed to build archive: {error}",
			details={"reason": str(error), "error_type": type(error).__name__},
		) from error
	return buffer.getvalue()
