"""
Scannable code rendering for participant tokens.
"""

# Standard Library
import math
import urllib.parse

# PIP3 modules
import PIL.Image
import qrcode
import qrcode.constants
import qrcode.exceptions

# local repo modules
import offline_ticket_builder as otb
import offline_ticket_builder.config
import offline_ticket_builder.errors


CodeConfig = otb.config.CodeConfig
CodeGenerationError = otb.errors.CodeGenerationError

CODE_DARK_COLOR = otb.config.CODE_DARK_COLOR
CODE_LIGHT_COLOR = otb.config.CODE_LIGHT_COLOR

ERROR_CORRECTION_LEVELS = {
	"L": qrcode.constants.ERROR_CORRECT_L,
	"M": qrcode.constants.ERROR_CORRECT_M,
	"Q": qrcode.constants.ERROR_CORRECT_Q,
	"H": qrcode.constants.ERROR_CORRECT_H,
}


#============================================
def build_code_url(token: str, code_config: CodeConfig) -> str:
	"""
	Build the registration URL embedded in a ticket code.

	Args:
		token: Participant token.
		code_config: Code configuration.

	Returns:
		URL string.
	"""
	return code_config.url_template.format(token=urllib.parse.quote(token, safe=""))


#============================================
def render_code_image(
	token: str,
	width: int,
	height: int,
	code_config: CodeConfig,
) -> PIL.Image.Image:
	"""
	Render a QR code for a token, stretched to exactly width x height.

	Args:
		token: Participant token.
		width: Target width in pixels.
		height: Target height in pixels.
		code_config: Code configuration.

	Returns:
		RGB PIL image.
	"""
	if width <= 0 or height <= 0:
		raise CodeGenerationError(token, f"invalid code size {width}x{height}")
	level = ERROR_CORRECTION_LEVELS.get(code_config.error_correction.upper())
	if level is None:
		raise ValueError(f"unknown error correction level {code_config.error_correction!r}")

	qr = qrcode.QRCode(version=None, error_correction=level, box_size=1, border=0)
	qr.add_data(build_code_url(token, code_config))
	try:
		qr.make(fit=True)
	except (qrcode.exceptions.DataOverflowError, ValueError) as error:
		raise CodeGenerationError(token, str(error) or type(error).__name__) from error

	# render at least as large as the target so the resize only scales down
	qr.box_size = max(1, math.ceil(max(width, height) / qr.modules_count))
	image = qr.make_image(fill_color=CODE_DARK_COLOR, back_color=CODE_LIGHT_COLOR)
	image = image.convert("RGB")
	if image.size != (width, height):
		image = image.resize((width, height), PIL.Image.Resampling.NEAREST)
	return image
