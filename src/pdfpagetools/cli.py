"""CLI entry point for pdfpagetools."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pdfpagetools import __version__, logger
from pdfpagetools.dependencies import ensure_cli_dependencies
from pdfpagetools.engine import PageOperationEngine
from pdfpagetools.exceptions import PackageError
from pdfpagetools.logging import configure_logging
from pdfpagetools.settings import get_settings
from pdfpagetools.typing.enums import SplitMode
from pdfpagetools.typing.models import (
    AddImageRequest,
    AddWatermarkRequest,
    BinaryAttachment,
    DeletePagesRequest,
    DocumentBundle,
    DocumentOutput,
    ExtractPagesRequest,
    ExtractTextRequest,
    ImagePlacement,
    MergeRequest,
    OperationRequest,
    ReadMetadataRequest,
    ReorderPagesRequest,
    RotatePagesRequest,
    SplitRequest,
    WatermarkStyle,
)

_PAGE_COMMANDS = ("delete", "extract", "split", "rotate", "add-image", "watermark")
_DOCUMENT_COMMANDS = (*_PAGE_COMMANDS, "reorder", "merge")


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="pdfpagetools")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")
    commands = {
        "delete": "Delete pages from a PDF",
        "extract": "Extract pages into a new PDF",
        "split": "Split selected pages into a new PDF",
        "reorder": "Reorder the pages of a PDF",
        "rotate": "Rotate pages of a PDF",
        "merge": "Merge several PDFs into one",
        "add-image": "Draw a PNG or JPEG image on pages of a PDF",
        "watermark": "Draw watermark text on pages of a PDF",
        "metadata": "Print the metadata of a PDF as JSON",
        "text": "Print the text of a PDF as JSON",
    }
    for name, help_text in commands.items():
        command = subparsers.add_parser(name, help=help_text)
        if name == "merge":
            command.add_argument("--input", required=True, type=Path, action="append", dest="input_paths")
        else:
            command.add_argument("--input", required=True, type=Path, dest="input_path")
        if name in _DOCUMENT_COMMANDS:
            command.add_argument("--output", required=True, type=Path, dest="output_path")
        if name in _PAGE_COMMANDS:
            default_pages = "all" if name in {"add-image", "watermark", "rotate", "split"} else None
            command.add_argument("--pages", default=default_pages, required=default_pages is None)

    reorder = subparsers.choices["reorder"]
    reorder.add_argument("--order", required=True)

    split = subparsers.choices["split"]
    split.add_argument(
        "--per-page",
        action="store_true",
        dest="per_page",
        help="Write one page-N.pdf per selected page into the --output directory",
    )

    rotate = subparsers.choices["rotate"]
    rotate.add_argument("--angle", type=int, default=90)

    add_image = subparsers.choices["add-image"]
    add_image.add_argument("--image", required=True, type=Path, dest="image_path")
    add_image.add_argument("--x", type=float, default=50.0)
    add_image.add_argument("--y", type=float, default=400.0)
    add_image.add_argument("--scale", type=float, default=0.5)

    watermark = subparsers.choices["watermark"]
    watermark.add_argument("--text", required=True)
    watermark.add_argument("--font-size", type=float, default=50.0, dest="font_size")
    watermark.add_argument("--color", default="#808080")
    watermark.add_argument("--opacity", type=float, default=0.3)
    watermark.add_argument("--x", type=float, default=None)
    watermark.add_argument("--y", type=float, default=None)

    return parser


def _build_request(args: argparse.Namespace) -> OperationRequest:  # noqa: PLR0911
    """Build an operation request from CLI arguments.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Returns:
        OperationRequest: Request object.
    """
    if args.command == "merge":
        return MergeRequest(
            sources=[BinaryAttachment.from_path(path) for path in args.input_paths],
            output_name=args.output_path.stem,
        )

    source = BinaryAttachment.from_path(args.input_path)
    output_name = args.output_path.stem if getattr(args, "output_path", None) else None
    match args.command:
        case "delete":
            return DeletePagesRequest(source=source, pages=args.pages, output_name=output_name)
        case "extract":
            return ExtractPagesRequest(source=source, pages=args.pages, output_name=output_name)
        case "split":
            mode = SplitMode.PAGES if getattr(args, "per_page", False) else SplitMode.RANGE
            return SplitRequest(source=source, pages=args.pages, mode=mode, output_name=output_name)
        case "reorder":
            return ReorderPagesRequest(source=source, order=args.order, output_name=output_name)
        case "rotate":
            return RotatePagesRequest(source=source, pages=args.pages, angle=args.angle, output_name=output_name)
        case "add-image":
            return AddImageRequest(
                source=source,
                image=BinaryAttachment.from_path(args.image_path),
                pages=args.pages,
                placement=ImagePlacement(x=args.x, y=args.y, scale=args.scale),
                output_name=output_name,
            )
        case "watermark":
            style = WatermarkStyle(
                text=args.text,
                font_size=args.font_size,
                color=args.color,
                opacity=args.opacity,
                x=args.x,
                y=args.y,
            )
            return AddWatermarkRequest(source=source, style=style, pages=args.pages, output_name=output_name)
        case "metadata":
            return ReadMetadataRequest(source=source)
        case _:
            return ExtractTextRequest(source=source)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments, `sys.argv[1:]` when None.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    ensure_cli_dependencies()

    try:
        result = PageOperationEngine().execute(_build_request(args))
    except PackageError:
        logger.exception("Operation failed", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Operation aborted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error during operation", extra={"command": args.command})
        return 1

    match result:
        case DocumentBundle():
            args.output_path.mkdir(parents=True, exist_ok=True)
            for document in result.documents:
                (args.output_path / document.file_name).write_bytes(document.data)
            logger.info(
                "Documents written",
                extra={"output_path": str(args.output_path), "documents": len(result.documents)},
            )
        case DocumentOutput():
            args.output_path.parent.mkdir(parents=True, exist_ok=True)
            args.output_path.write_bytes(result.data)
            logger.info("Document written", extra={"output_path": str(args.output_path)})
        case _:
            sys.stdout.write(json.dumps(result.payload, ensure_ascii=False, indent=2) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
