#!/usr/bin/env python3
"""
document_pipeline.py — Extracted text → structured PDF / DOCX / JSON
=====================================================================

Pipeline:
  1. NORMALIZE the extracted text (invisible chars, LTR isolation).
  2. CLASSIFY lines into blocks (headings, lists, label/value, contacts).
  3. BUILD the DocumentModel (sections + aggregated contacts).
  4. RENDER:
       pdf   fixed A4 pages via the layout engine (PyMuPDF)
       docx  flowed Word document (python-docx)
       json  the DocumentModel itself

With --raw the text skips parsing and is exported line by line, the way
the first version of the portal did it.

Input may be a text file, '-' for stdin, or a PDF, which is first sent to
the extraction webhook configured in api/.env.

Usage:
    python document_pipeline.py --input memo.txt
    python document_pipeline.py --input memo.txt --format docx --output memo.docx
    python document_pipeline.py --input scan.pdf --format json
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from block_classify import ClassifierOptions
from document_model import DocumentModel, parse_document
from export_docx import DOCUMENT_TITLE, render_docx, render_text_docx
from export_pdf import render_pdf, render_text_pdf
from utils.arabic_utils import BIDI_MODES

logger = logging.getLogger(__name__)

# ─── Configuration ──────────────────────────────────────────────────────────

FORMATS = ("pdf", "docx", "json")

DEFAULT_FILENAMES = {
    "pdf":  "مذكرة-تفاهم.pdf",
    "docx": "result.docx",
    "json": "document.json",
}
RAW_FILENAMES = {
    "pdf":  "result.pdf",
    "docx": "result.docx",
}

MEDIA_TYPES = {
    "pdf":  "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "json": "application/json",
}


def model_to_json(model: DocumentModel) -> bytes:
    return json.dumps(model.to_dict(), ensure_ascii=False, indent=2).encode("utf-8")


def render_document(
    text: Optional[str],
    fmt: str = "pdf",
    font_path: Optional[str] = None,
    bidi_mode: str = "full",
    stray_contacts: bool = False,
    raw: bool = False,
    title: str = DOCUMENT_TITLE,
) -> bytes:
    """
    Run the whole pipeline on extracted text.

    Args:
        text: Extracted text (logical order, may be empty)
        fmt: "pdf", "docx" or "json"
        font_path: TTF for the PDF renderer (None = auto-detect)
        bidi_mode: Visual-order strategy for the PDF renderer
        stray_contacts: Accept contact lines outside the contact section
        raw: Export the text line by line, without parsing
        title: Document title (PDF header band / DOCX title)

    Returns:
        The rendered file as bytes

    Raises:
        ValueError: Unknown format or bidi mode
        FileNotFoundError: font_path does not exist
    """
    if fmt not in FORMATS:
        raise ValueError(f"unknown format: {fmt!r} (expected one of {', '.join(FORMATS)})")
    if bidi_mode not in BIDI_MODES:
        raise ValueError(f"unknown bidi mode: {bidi_mode!r}")

    if raw:
        if fmt == "pdf":
            return render_text_pdf(text, font_path=font_path, bidi_mode=bidi_mode)
        if fmt == "docx":
            return render_text_docx(text)
        raise ValueError("raw export supports pdf and docx only")

    model = parse_document(text, ClassifierOptions(stray_contacts=stray_contacts))
    if model.is_empty:
        logger.warning("Document has no content; rendering an empty memo")

    if fmt == "pdf":
        return render_pdf(model, title=title, font_path=font_path, bidi_mode=bidi_mode)
    if fmt == "docx":
        return render_docx(model, title=title)
    return model_to_json(model)


def default_filename(fmt: str, raw: bool = False) -> str:
    return (RAW_FILENAMES if raw else DEFAULT_FILENAMES)[fmt]


def read_input(source: str) -> str:
    """Read text from a file, stdin ('-'), or a PDF via the extraction webhook."""
    if source == "-":
        return sys.stdin.read()

    path = Path(source)
    if path.suffix.lower() == ".pdf":
        from api.config import settings
        from api.extraction_client import ExtractionClient

        client = ExtractionClient(settings.webhook_url, timeout=settings.http_timeout)
        return client.extract_file(path)

    return path.read_text(encoding="utf-8")


def main():
    parser = argparse.ArgumentParser(
        description="Render extracted Arabic memo text as structured PDF / DOCX / JSON.")
    parser.add_argument("--input", "-i", required=True,
                        help="Text file, '-' for stdin, or a PDF to extract first")
    parser.add_argument("--output", "-o", default=None)
    parser.add_argument("--format", "-f", choices=FORMATS, default="pdf")
    parser.add_argument("--font", default=None, help="Arabic TTF for PDF output")
    parser.add_argument("--bidi-mode", choices=BIDI_MODES, default="full")
    parser.add_argument("--stray-contacts", action="store_true",
                        help="Also collect contact lines outside the contact section")
    parser.add_argument("--raw", action="store_true",
                        help="Export the text line by line without parsing")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.input != "-" and not Path(args.input).exists():
        print(f"Error: {args.input} not found.", file=sys.stderr)
        sys.exit(1)
    if args.raw and args.format == "json":
        print("Error: --raw supports pdf and docx only.", file=sys.stderr)
        sys.exit(2)

    t_start = time.time()
    text = read_input(args.input)
    data = render_document(
        text,
        args.format,
        font_path=args.font,
        bidi_mode=args.bidi_mode,
        stray_contacts=args.stray_contacts,
        raw=args.raw,
    )

    out_path = Path(args.output or default_filename(args.format, args.raw))
    out_path.write_bytes(data)
    logger.info(f"✓ Wrote {out_path} ({len(data) / 1024:.1f} KB) "
                f"in {time.time() - t_start:.2f}s")


if __name__ == "__main__":
    main()
