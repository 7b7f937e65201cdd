"""
Main entry point for cowork skills.

    cowork-skills <skill> [skill arguments...]
    cowork-skills --help

Each skill lives in its own module with `main(argv) -> int`; the module is only
imported when its skill is invoked, so office skills run without a browser.
"""

import importlib
import sys
from typing import Optional

from core.cli import EXIT_FAILURE, EXIT_OK

SKILLS = {
    "monitor-dashboard": "chrome.monitor",
    "check-gtm": "chrome.gtm",
    "extract-data": "chrome.extract",
    "scrape-data": "chrome.scrape",
    "fill-form": "chrome.form",
    "screenshot": "chrome.screenshot",
    "page-pdf": "chrome.page_pdf",
    "test-page": "chrome.tester",
    "excel-advanced": "sheets.advanced",
    "csv-to-excel": "sheets.from_csv",
    "excel-to-csv": "sheets.to_csv",
    "create-charts": "sheets.charts",
    "create-financial-model": "sheets.financial",
    "create-presentation": "slides.presentation",
    "pptx-advanced": "slides.advanced",
    "create-professional-doc": "documents.professional",
    "docx-advanced": "documents.advanced",
    "annotate-pdf": "pdf_tools.annotate",
    "fill-pdf-template": "pdf_tools.fill_template",
    "merge-pdfs": "pdf_tools.merge",
}


def usage() -> str:
    width = max(len(name) for name in SKILLS)
    lines = ["usage: cowork-skills <skill> [arguments...]", "", "skills:"]
    lines.extend(f"  {name.ljust(width)}  {module}" for name, module in SKILLS.items())
    lines.append("")
    lines.append("Run `cowork-skills <skill> --help` for the arguments of one skill.")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)

    if not argv or argv[0] in ("-h", "--help"):
        print(usage())
        return EXIT_OK if argv else EXIT_FAILURE

    name, rest = argv[0], argv[1:]
    if name not in SKILLS:
        print(f"cowork-skills: unknown skill: {name}\n", file=sys.stderr)
        print(usage(), file=sys.stderr)
        return EXIT_FAILURE

    module = importlib.import_module(SKILLS[name])
    try:
        return module.main(rest)
    except SystemExit as e:
        # argparse exits directly on --help and on bad arguments
        if e.code is None:
            return EXIT_OK
        return e.code if isinstance(e.code, int) else EXIT_FAILURE


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
