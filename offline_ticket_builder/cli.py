"""
CLI entry points for offline ticket generation.
"""

# Standard Library
import argparse
import csv
import json
import mimetypes
import pathlib
import sys
import time

# local repo modules
import offline_ticket_builder as otb
import offline_ticket_builder.config
import offline_ticket_builder.pipeline


Participant = otb.pipeline.Participant
TemplateUpload = otb.pipeline.TemplateUpload
CodeRect = otb.pipeline.CodeRect
OutputArtifact = otb.pipeline.OutputArtifact
LayoutConfig = otb.config.LayoutConfig
CodeConfig = otb.config.CodeConfig


#============================================
def read_participants(path: pathlib.Path) -> list[Participant]:
	"""
	Read participants from a CSV file.

	A header with a "token" column (and optionally "identifier" or "id")
	is used when present; otherwise each non-empty line is one token.

	Args:
		path: CSV path.

	Returns:
		Ordered participants.
	"""
	with path.open("r", encoding="utf-8", newline="") as handle:
		rows = [row for row in csv.reader(handle) if row and any(cell.strip() for cell in row)]
	if not rows:
		return []
	header = [cell.strip().lower() for cell in rows[0]]
	participants: list[Participant] = []
	if "token" in header:
		token_col = header.index("token")
		id_col = None
		for name in ("identifier", "id"):
			if name in header:
				id_col = header.index(name)
				break
		for number, row in enumerate(rows[1:], start=1):
			token = row[token_col].strip() if token_col < len(row) else ""
			identifier = str(number)
			if id_col is not None and id_col < len(row):
				identifier = row[id_col].strip()
			participants.append(Participant(identifier=identifier, token=token))
		return participants
	for number, row in enumerate(rows, start=1):
		participants.append(Participant(identifier=str(number), token=row[0].strip()))
	return participants


#============================================
def read_template(path: pathlib.Path) -> TemplateUpload:
	"""
	Read a template image file.

	Args:
		path: Image path.

	Returns:
		TemplateUpload.
	"""
	content_type, _encoding = mimetypes.guess_type(path.name)
	return TemplateUpload(data=path.read_bytes(), content_type=content_type, filename=path.name)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	event_id: str,
	template_path: pathlib.Path,
	participants: list[Participant],
	artifact: OutputArtifact,
	output_path: pathlib.Path,
	layout: LayoutConfig,
	code_config: CodeConfig,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		event_id: Event identifier.
		template_path: Template image path.
		participants: Participants in the batch.
		artifact: Produced artifact.
		output_path: Where the artifact was written.
		layout: Layout configuration.
		code_config: Code configuration.
	"""
	scaled_rect = None
	if artifact.scaled_rect is not None:
		scaled_rect = artifact.scaled_rect.as_dict()
	data = {
		"event_id": event_id,
		"template": str(template_path),
		"participants": len(participants),
		"output": str(output_path),
		"kind": artifact.kind,
		"content_type": artifact.content_type,
		"bytes": len(artifact.data),
		"pages": artifact.pages,
		"tickets_per_page": layout.tickets_per_page,
		"document_error": artifact.document_error,
		"code_rect": scaled_rect,
		"code_url_template": code_config.url_template,
		"layout": {
			"page_width": layout.page_width,
			"page_height": layout.page_height,
			"ticket_width": layout.ticket_width,
			"ticket_height": layout.ticket_height,
			"columns": layout.columns,
			"rows": layout.rows,
			"margin_x": layout.margin_x,
			"margin_y": layout.margin_y,
			"dpi": layout.dpi,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Generate printable offline tickets with QR codes.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-t", "--template", dest="template_path", required=True, help="Template PNG or JPEG.")
	input_group.add_argument(
		"-p", "--participants", dest="participants_path", required=True,
		help="CSV with a token column, or one token per line.",
	)
	input_group.add_argument("-e", "--event-id", dest="event_id", required=True, help="Event identifier.")

	code_group = parser.add_argument_group("Code placement")
	code_group.add_argument("-x", "--barcode-x", dest="barcode_x", type=int, required=True, help="Code x in template pixels.")
	code_group.add_argument("-y", "--barcode-y", dest="barcode_y", type=int, required=True, help="Code y in template pixels.")
	code_group.add_argument("-W", "--barcode-width", dest="barcode_width", type=int, required=True, help="Code width in template pixels.")
	code_group.add_argument("-H", "--barcode-height", dest="barcode_height", type=int, required=True, help="Code height in template pixels.")
	code_group.add_argument(
		"-u", "--register-url", dest="register_url", default=otb.config.DEFAULT_REGISTER_URL,
		help="URL template with a {token} placeholder.",
	)

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output-dir", dest="output_dir", default=".", help="Output directory.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument(
		"-w", "--workers", dest="workers", type=int, default=otb.config.DEFAULT_WORKERS,
		help="Concurrent ticket and page renders.",
	)
	behavior_group.add_argument("-q", "--quiet", dest="verbose", action="store_false", help="Only print errors.")
	parser.set_defaults(verbose=True)

	args = parser.parse_args(argv)
	try:
		otb.config.build_code_config(args.register_url)
		otb.config.build_batch_config(args.workers)
	except ValueError as error:
		parser.error(str(error))
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> int:
	"""
	Run the ticket pipeline from files on disk.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Process exit status.
	"""
	template_path = pathlib.Path(args.template_path)
	participants_path = pathlib.Path(args.participants_path)
	output_dir = pathlib.Path(args.output_dir)
	if args.verbose:
		print("Offline ticket pipeline")
		print(f"Event: {args.event_id}")
		print(f"Template: {template_path}")
		print(f"Participants file: {participants_path}")
		print(f"Output directory: {output_dir}")

	layout = otb.config.build_layout_config()
	code_config = otb.config.build_code_config(args.register_url)
	batch_config = otb.config.build_batch_config(args.workers)
	participants = read_participants(participants_path)
	template = read_template(template_path)
	code_rect = CodeRect(
		x=args.barcode_x,
		y=args.barcode_y,
		width=args.barcode_width,
		height=args.barcode_height,
	)

	start_time = time.perf_counter()
	result = otb.pipeline.handle_request(
		args.event_id,
		template,
		code_rect,
		participants,
		layout=layout,
		code_config=code_config,
		batch_config=batch_config,
		verbose=args.verbose,
	)
	if isinstance(result, otb.pipeline.ErrorReport):
		print(json.dumps(result.to_dict(), indent=2, sort_keys=True), file=sys.stderr)
		return 1

	output_dir.mkdir(parents=True, exist_ok=True)
	output_path = output_dir / result.filename
	output_path.write_bytes(result.data)

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	write_manifest(
		pathlib.Path(manifest_path),
		args.event_id,
		template_path,
		participants,
		result,
		output_path,
		layout,
		code_config,
	)
	total_time = time.perf_counter() - start_time
	if args.verbose:
		print(f"Output written: {output_path} ({result.content_type})")
		print(f"Manifest written: {manifest_path}")
		print(f"Timing: total={total_time:.2f}s")
	return 0


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	status = run_pipeline(args)
	if status:
		sys.exit(status)
