"""
Code rectangle validation and scaling into ticket space.
"""

# Standard Library
import dataclasses
import math

# local repo modules
import offline_ticket_builder as otb
import offline_ticket_builder.config
import offline_ticket_builder.errors


LayoutConfig = otb.config.LayoutConfig
CodeConfig = otb.config.CodeConfig
ValidationError = otb.errors.ValidationError


@dataclasses.dataclass(frozen=True)
class CodeRect:
	x: int
	y: int
	width: int
	height: int

	def as_dict(self) -> dict[str, int]:
		return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class ScaledRect:
	x: int
	y: int
	width: int
	height: int
	scale: float

	def as_dict(self) -> dict[str, float]:
		return dataclasses.asdict(self)


#============================================
def round_half_up(value: float) -> int:
	"""
	Round to the nearest integer with halves going up.

	Args:
		value: Value to round.

	Returns:
		Rounded integer.
	"""
	return int(math.floor(value + 0.5))


#============================================
def validate_code_rect(rect: CodeRect, template_width: int, template_height: int) -> None:
	"""
	Check a code rectangle against the original template size.

	Args:
		rect: Requested rectangle in template pixels.
		template_width: Template width in pixels.
		template_height: Template height in pixels.
	"""
	details = {
		"template_width": template_width,
		"template_height": template_height,
		"code_rect": rect.as_dict(),
	}
	if rect.x < 0 or rect.y < 0 or rect.width <= 0 or rect.height <= 0:
		raise ValidationError(
			"Invalid barcode position or size",
			code="invalid_code_rect",
			details=details,
		)
	if rect.x + rect.width > template_width or rect.y + rect.height > template_height:
		raise ValidationError(
			"Barcode position exceeds template bounds. "
			f"Template: {template_width}x{template_height}px, "
			f"Barcode: ({rect.x},{rect.y},{rect.width},{rect.height})",
			code="code_rect_out_of_bounds",
			details=details,
		)


#============================================
def compute_scale(template_width: int, template_height: int, layout: LayoutConfig) -> float:
	"""
	Compute the uniform contain-fit scale from template to ticket.

	Args:
		template_width: Template width in pixels.
		template_height: Template height in pixels.
		layout: Layout configuration.

	Returns:
		Scale factor.
	"""
	if template_width <= 0 or template_height <= 0:
		raise ValueError("template dimensions must be positive")
	scale_x = layout.ticket_width / template_width
	scale_y = layout.ticket_height / template_height
	return min(scale_x, scale_y)


#============================================
def scale_code_rect(
	rect: CodeRect,
	template_width: int,
	template_height: int,
	layout: LayoutConfig,
	code_config: CodeConfig,
) -> ScaledRect:
	"""
	Map a template-space rectangle into ticket space.

	Sizes are floored to the minimum scannable size, then the rectangle is
	clamped so it never leaves the ticket canvas. The floor wins over the
	requested size, the canvas wins over the floor.

	Args:
		rect: Rectangle in template pixels.
		template_width: Template width in pixels.
		template_height: Template height in pixels.
		layout: Layout configuration.
		code_config: Code configuration with the size floors.

	Returns:
		ScaledRect inside the ticket canvas.
	"""
	scale = compute_scale(template_width, template_height, layout)
	scaled_x = round_half_up(rect.x * scale)
	scaled_y = round_half_up(rect.y * scale)
	scaled_width = max(code_config.min_width, round_half_up(rect.width * scale))
	scaled_height = max(code_config.min_height, round_half_up(rect.height * scale))

	final_x = min(scaled_x, layout.ticket_width - scaled_width)
	final_y = min(scaled_y, layout.ticket_height - scaled_height)
	# floors larger than the canvas push the origin negative
	final_x = max(0, final_x)
	final_y = max(0, final_y)
	final_width = min(scaled_width, layout.ticket_width - final_x)
	final_height = min(scaled_height, layout.ticket_height - final_y)

	return ScaledRect(
		x=final_x,
		y=final_y,
		width=final_width,
		height=final_height,
		scale=scale,
	)
