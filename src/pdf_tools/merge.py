"""
PDF Merger - Concatenate PDFs in the order given.

    merge-pdfs merged.pdf first.pdf second.pdf [more.pdf ...]
"""

from pathlib import Path
from typing import Optional

import structlog
from pypdf import PdfWriter

from core.cli import SkillArgumentParser, execute
from core.errors import ArgumentError
from pdf_tools.overlay import open_pdf, save_pdf

logger = structlog.get_logger()

MIN_INPUTS = 2


def merge_pdfs(output: str, inputs: list[str]) -> int:
    """Write every page of every input to `output`; returns the page count."""
    if len(inputs) < MIN_INPUTS:
        raise ArgumentError(f"At least {MIN_INPUTS} input PDFs are required", argument="inputs")

    writer = PdfWriter()
    for path in inputs:
        reader = open_pdf(path)
        logger.info("pdf_added", path=str(Path(path)), pages=len(reader.pages))
        writer.append(reader)

    save_pdf(writer, output)
    pages = len(writer.pages)
    logger.info("pdfs_merged", output=output, inputs=len(inputs), pages=pages)
    return pages


def build_parser() -> SkillArgumentParser:
    parser = SkillArgumentParser(
        prog="merge-pdfs",
        description="Merge multiple PDF files into one",
    )
    parser.add_argument("output", help="Output PDF")
    parser.add_argument("inputs", nargs="+", help="Input PDFs, in order (at least two)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def operation():
        merge_pdfs(args.output, args.inputs)

    return execute(operation, skill="merge-pdfs")


if __name__ == "__main__":
    raise SystemExit(main())
