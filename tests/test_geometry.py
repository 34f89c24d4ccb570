import pytest

import offline_ticket_builder.config
import offline_ticket_builder.errors
import offline_ticket_builder.geometry


CodeRect = offline_ticket_builder.geometry.CodeRect
ValidationError = offline_ticket_builder.errors.ValidationError


#============================================
def build_small_layout() -> offline_ticket_builder.config.LayoutConfig:
	"""
	Build a layout whose ticket is smaller than the code size floors.
	"""
	return offline_ticket_builder.config.LayoutConfig(
		page_width=300,
		page_height=300,
		ticket_width=80,
		ticket_height=40,
		columns=2,
		rows=5,
		margin_x=10,
		margin_y=10,
		dpi=72,
	)


#============================================
def test_reference_scenario_scale_and_rect() -> None:
	"""
	A 2000x1000 template scales by 0.6 and keeps the rect unclamped.
	"""
	layout = offline_ticket_builder.config.build_layout_config()
	code_config = offline_ticket_builder.config.build_code_config()
	scale = offline_ticket_builder.geometry.compute_scale(2000, 1000, layout)
	assert scale == pytest.approx(0.6)

	rect = CodeRect(x=1700, y=50, width=250, height=250)
	scaled = offline_ticket_builder.geometry.scale_code_rect(rect, 2000, 1000, layout, code_config)
	assert (scaled.x, scaled.y, scaled.width, scaled.height) == (1020, 30, 150, 150)
	assert scaled.scale == pytest.approx(0.6)


#============================================
def test_round_half_up() -> None:
	"""
	Halves round up, not to even.
	"""
	assert offline_ticket_builder.geometry.round_half_up(0.5) == 1
	assert offline_ticket_builder.geometry.round_half_up(2.5) == 3
	assert offline_ticket_builder.geometry.round_half_up(2.49) == 2
	assert offline_ticket_builder.geometry.round_half_up(0.0) == 0


#============================================
def test_floors_applied_to_tiny_rect() -> None:
	"""
	Small requested rects grow to the scannable minimum.
	"""
	layout = offline_ticket_builder.config.build_layout_config()
	code_config = offline_ticket_builder.config.build_code_config()
	rect = CodeRect(x=10, y=10, width=20, height=10)
	scaled = offline_ticket_builder.geometry.scale_code_rect(rect, 1200, 680, layout, code_config)
	assert scaled.scale == pytest.approx(1.0)
	assert (scaled.x, scaled.y) == (10, 10)
	assert scaled.width == code_config.min_width
	assert scaled.height == code_config.min_height


#============================================
def test_floor_near_edge_moves_origin_inside() -> None:
	"""
	A floored rect at the bottom-right corner shifts back inside the canvas.
	"""
	layout = offline_ticket_builder.config.build_layout_config()
	code_config = offline_ticket_builder.config.build_code_config()
	rect = CodeRect(x=1190, y=670, width=10, height=10)
	scaled = offline_ticket_builder.geometry.scale_code_rect(rect, 1200, 680, layout, code_config)
	assert scaled.width == 100
	assert scaled.height == 50
	assert scaled.x == 1200 - 100
	assert scaled.y == 680 - 50


#============================================
def test_scaled_rect_within_ticket_sweep() -> None:
	"""
	Scaled rects stay inside the ticket and honor floors across templates.
	"""
	layout = offline_ticket_builder.config.build_layout_config()
	code_config = offline_ticket_builder.config.build_code_config()
	template_sizes = [
		(2000, 1000),
		(1200, 680),
		(600, 340),
		(300, 3000),
		(5000, 200),
		(101, 51),
		(4000, 4000),
	]
	failures = []
	for template_width, template_height in template_sizes:
		for fx in (0.0, 0.25, 0.5, 0.9):
			for fw in (0.01, 0.1, 0.5):
				x = int(template_width * fx)
				y = int(template_height * fx)
				width = max(1, min(template_width - x, int(template_width * fw)))
				height = max(1, min(template_height - y, int(template_height * fw)))
				rect = CodeRect(x=x, y=y, width=width, height=height)
				scaled = offline_ticket_builder.geometry.scale_code_rect(
					rect, template_width, template_height, layout, code_config,
				)
				inside = (
					0 <= scaled.x
					and 0 <= scaled.y
					and scaled.x + scaled.width <= layout.ticket_width
					and scaled.y + scaled.height <= layout.ticket_height
				)
				floored = scaled.width >= code_config.min_width and scaled.height >= code_config.min_height
				if not (inside and floored):
					failures.append(f"{template_width}x{template_height} {rect} -> {scaled}")
	if failures:
		raise AssertionError("Scaled rect invariant broken:\n" + "\n".join(failures[:10]))


#============================================
def test_floors_larger_than_ticket_are_clamped() -> None:
	"""
	When the floors exceed the canvas, the canvas wins.
	"""
	layout = build_small_layout()
	code_config = offline_ticket_builder.config.build_code_config()
	rect = CodeRect(x=30, y=10, width=10, height=10)
	scaled = offline_ticket_builder.geometry.scale_code_rect(rect, 80, 40, layout, code_config)
	assert (scaled.x, scaled.y) == (0, 0)
	assert (scaled.width, scaled.height) == (80, 40)


#============================================
def test_validate_rejects_non_positive_size() -> None:
	"""
	Zero or negative values are rejected before scaling.
	"""
	for rect in (
		CodeRect(x=0, y=0, width=0, height=10),
		CodeRect(x=0, y=0, width=10, height=-1),
		CodeRect(x=-1, y=0, width=10, height=10),
	):
		with pytest.raises(ValidationError) as excinfo:
			offline_ticket_builder.geometry.validate_code_rect(rect, 100, 100)
		assert excinfo.value.code == "invalid_code_rect"


#============================================
def test_validate_out_of_bounds_reports_context() -> None:
	"""
	Bounds errors carry the template size and the requested rect.
	"""
	rect = CodeRect(x=1900, y=50, width=250, height=250)
	with pytest.raises(ValidationError) as excinfo:
		offline_ticket_builder.geometry.validate_code_rect(rect, 2000, 1000)
	error = excinfo.value
	assert error.code == "code_rect_out_of_bounds"
	assert error.details["template_width"] == 2000
	assert error.details["template_height"] == 1000
	assert error.details["code_rect"] == {"x": 1900, "y": 50, "width": 250, "height": 250}
	assert "2000x1000" in error.message


#============================================
def test_validate_accepts_rect_touching_edges() -> None:
	"""
	A rect ending exactly on the template edge is valid.
	"""
	rect = CodeRect(x=50, y=50, width=50, height=50)
	offline_ticket_builder.geometry.validate_code_rect(rect, 100, 100)
