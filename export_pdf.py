#!/usr/bin/env python3
"""
export_pdf.py — Render a DocumentModel to a fixed-page A4 PDF via PyMuPDF.

Consumes the draw commands produced by page_layout.py and paints them on
one PyMuPDF page per layout page.

Strategy
--------
1. Resolve an Arabic-capable TTF (explicit path, then known candidates,
   then Helvetica with a warning).  An explicit path that cannot be read
   is fatal: a half-rendered memo is not an acceptable result.
2. Lay out the model with a FitzTextMeasurer (font metrics from the same
   font that draws the glyphs).  Page 1 reserves room for the header band.
3. Paint the header band once (page 1), every draw command on its page,
   and the footer caption once (last page).
4. PyMuPDF places glyphs strictly left to right and does no shaping, so
   every RTL text run goes through visual_order() (Arabic shaping + bidi
   reordering).  LTR runs (email / phone cells) are drawn as-is.

Usage
-----
    from export_pdf import render_pdf
    pdf_bytes = render_pdf(model)
    pdf_bytes = render_text_pdf(raw_text)   # unstructured, line by line
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import fitz  # PyMuPDF

from document_model import DocumentModel
from page_layout import (
    DARK_GREEN, DEFAULT_STYLE, EMERALD, MINT, MM, MUTED_COLOR, WHITE,
    DrawCircle, DrawCommand, DrawLine, DrawRect, DrawText, LayoutStyle,
    PageBreak, PageSpec, layout,
)
from utils.arabic_utils import LRI, PDI, shape, strip_marks, visual_order

logger = logging.getLogger(__name__)


# ─── Configuration ──────────────────────────────────────────────────────────

DOCUMENT_TITLE  = "مذكرة تفاهم"
FOOTER_CAPTION  = "تم إنشاء هذا المستند تلقائيًا"
FONT_ALIAS      = "arabic"

HEADER_HEIGHT   = 35 * MM
HEADER_RESERVE  = 50 * MM      # page-1 content starts below the header band
TITLE_SIZE      = 22
FOOTER_SIZE     = 9
FOOTER_OFFSET   = 10 * MM      # footer baseline distance from page bottom

# First existing file wins when no font is configured
FONT_CANDIDATES = [
    "fonts/NotoNaskhArabic-Regular.ttf",
    "fonts/Amiri-Regular.ttf",
    "/usr/share/fonts/truetype/noto/NotoNaskhArabic-Regular.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansArabic-Regular.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    r"C:\Windows\Fonts\arial.ttf",
]

# Isolated LTR runs stay whole when wrapping
_WRAP_TOKEN_RE = re.compile(
    rf'(?:[^\s{LRI}]*{LRI}[^{PDI}]*{PDI})+[^\s{LRI}]*|\S+'
)


# ─── Fonts ──────────────────────────────────────────────────────────────────

@dataclass
class PdfFont:
    alias: str
    font: fitz.Font
    path: Optional[Path] = None


def resolve_font_path(font_path: Optional[str] = None) -> Optional[Path]:
    """Explicit path must exist; otherwise the first existing candidate."""
    if font_path:
        path = Path(font_path)
        if not path.is_file():
            raise FileNotFoundError(f"Font file not found: {path}")
        return path
    for candidate in FONT_CANDIDATES:
        path = Path(candidate)
        if path.is_file():
            return path
    return None


def load_font(font_path: Optional[str] = None) -> PdfFont:
    path = resolve_font_path(font_path)
    if path is None:
        logger.warning("No Arabic font found, falling back to Helvetica "
                       "(Arabic glyphs will not render)")
        return PdfFont(alias="helv", font=fitz.Font("helv"))
    logger.info(f"Using font: {path}")
    return PdfFont(alias=FONT_ALIAS, font=fitz.Font(fontfile=str(path)), path=path)


# ─── Measure & wrap ─────────────────────────────────────────────────────────

class FitzTextMeasurer:
    """Greedy word wrap using the drawing font's metrics."""

    def __init__(self, font: fitz.Font):
        self.font = font

    def width(self, text: str, size: float) -> float:
        return self.font.text_length(shape(text), fontsize=size)

    def _split_long(self, token: str, width: float, size: float) -> List[str]:
        parts, cur = [], ""
        for ch in token:
            if cur and self.width(cur + ch, size) > width:
                parts.append(cur)
                cur = ch
            else:
                cur += ch
        if cur:
            parts.append(cur)
        return parts

    def wrap(self, text: str, width: float, size: float) -> List[str]:
        lines: List[str] = []
        cur = ""
        for token in _WRAP_TOKEN_RE.findall(text or ""):
            pieces = (self._split_long(token, width, size)
                      if self.width(token, size) > width else [token])
            for piece in pieces:
                candidate = f"{cur} {piece}" if cur else piece
                if cur and self.width(candidate, size) > width:
                    lines.append(cur)
                    cur = piece
                else:
                    cur = candidate
        if cur:
            lines.append(cur)
        return lines


# ─── Painting ───────────────────────────────────────────────────────────────

def _relative_radius(command: DrawRect) -> Optional[float]:
    """PyMuPDF takes the corner radius as a fraction (<= 0.5) of the shorter side."""
    if not command.radius:
        return None
    x0, y0, x1, y1 = command.rect
    shorter = min(x1 - x0, y1 - y0)
    if shorter <= 0:
        return None
    return min(0.5, command.radius / shorter)


class FixedPageRenderer:
    """Paints layout draw commands onto PyMuPDF pages."""

    def __init__(self, pdf_font: PdfFont, bidi_mode: str = "full"):
        self.pdf_font = pdf_font
        self.bidi_mode = bidi_mode

    def new_page(self, doc: fitz.Document, spec: PageSpec) -> fitz.Page:
        page = doc.new_page(width=spec.width, height=spec.height)
        if self.pdf_font.path is not None:
            page.insert_font(fontname=self.pdf_font.alias,
                             fontfile=str(self.pdf_font.path))
        return page

    def text_at(self, page: fitz.Page, rect, text: str, size: float, color,
                align: str = "right", rtl: bool = True) -> None:
        glyphs = visual_order(text, self.bidi_mode) if rtl else strip_marks(text)
        if not glyphs.strip():
            return
        x0, y0, x1, y1 = rect
        w = self.pdf_font.font.text_length(glyphs, fontsize=size)
        if align == "left":
            x = x0
        elif align == "center":
            x = (x0 + x1 - w) / 2
        else:
            x = x1 - w
        baseline = y0 + ((y1 - y0) + size * 0.7) / 2
        page.insert_text((x, baseline), glyphs, fontsize=size,
                         fontname=self.pdf_font.alias, color=color)

    def draw(self, page: fitz.Page, command: DrawCommand) -> None:
        if isinstance(command, DrawRect):
            page.draw_rect(fitz.Rect(*command.rect), color=command.stroke,
                           fill=command.fill, width=0.5,
                           radius=_relative_radius(command))
        elif isinstance(command, DrawCircle):
            page.draw_circle(fitz.Point(*command.center), command.radius,
                             color=None, fill=command.fill)
        elif isinstance(command, DrawLine):
            page.draw_line(fitz.Point(*command.start), fitz.Point(*command.end),
                           color=command.color, width=command.width)
        elif isinstance(command, DrawText):
            self.text_at(page, command.rect, command.text, command.size,
                         command.color, command.align, command.rtl)
        elif isinstance(command, PageBreak):
            pass  # pages are pre-allocated from the layout page count
        else:
            raise TypeError(f"Unknown draw command: {command!r}")

    def header(self, page: fitz.Page, spec: PageSpec, title: str) -> None:
        w = spec.width
        page.draw_rect(fitz.Rect(0, 0, w, HEADER_HEIGHT), color=None, fill=EMERALD)
        page.draw_circle(fitz.Point(w - 15 * MM, 10 * MM), 25 * MM,
                         color=None, fill=DARK_GREEN)
        page.draw_circle(fitz.Point(15 * MM, 25 * MM), 20 * MM,
                         color=None, fill=MINT)
        self.text_at(page, (0, 12 * MM, w, 27 * MM), title, TITLE_SIZE, WHITE,
                     align="center")
        page.draw_line(fitz.Point(w / 2 - 30 * MM, 27 * MM),
                       fitz.Point(w / 2 + 30 * MM, 27 * MM),
                       color=WHITE, width=0.8)

    def footer(self, page: fitz.Page, spec: PageSpec, caption: str) -> None:
        y = spec.height - FOOTER_OFFSET
        self.text_at(page, (0, y - FOOTER_SIZE, spec.width, y + FOOTER_SIZE * 0.4),
                     caption, FOOTER_SIZE, MUTED_COLOR, align="center")


def render_pdf(
    model: DocumentModel,
    title: str = DOCUMENT_TITLE,
    footer: str = FOOTER_CAPTION,
    font_path: Optional[str] = None,
    bidi_mode: str = "full",
    spec: Optional[PageSpec] = None,
    style: LayoutStyle = DEFAULT_STYLE,
) -> bytes:
    """Render the model to PDF bytes.  Font errors propagate."""
    pdf_font = load_font(font_path)
    spec = spec or PageSpec(first_page_top=HEADER_RESERVE)
    result = layout(model, spec, FitzTextMeasurer(pdf_font.font), style)

    renderer = FixedPageRenderer(pdf_font, bidi_mode)
    doc = fitz.open()
    try:
        pages = [renderer.new_page(doc, spec) for _ in range(result.page_count)]
        renderer.header(pages[0], spec, title)
        for page_index, command in result.commands:
            renderer.draw(pages[page_index], command)
        renderer.footer(pages[-1], spec, footer)

        doc.set_metadata({"title": title, "creator": "arabic-memo-export"})
        data = doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()

    logger.info(f"Rendered PDF: {result.page_count} page(s), {len(data) / 1024:.1f} KB")
    return data


# ─── Raw text export ────────────────────────────────────────────────────────

RAW_SIZE        = 12
RAW_WIDTH       = 180 * MM
RAW_RIGHT       = 195 * MM
RAW_TOP         = 20 * MM
RAW_LINE        = 7 * MM
RAW_LIMIT       = 280 * MM     # next line past this y starts a new page


def render_text_pdf(
    text: Optional[str],
    font_path: Optional[str] = None,
    bidi_mode: str = "full",
) -> bytes:
    """Unstructured export: the extracted text wrapped line by line."""
    pdf_font = load_font(font_path)
    measurer = FitzTextMeasurer(pdf_font.font)
    renderer = FixedPageRenderer(pdf_font, bidi_mode)
    spec = PageSpec()

    lines: List[str] = []
    for source_line in (text or "").split("\n"):
        lines.extend(measurer.wrap(source_line, RAW_WIDTH, RAW_SIZE) or [""])

    doc = fitz.open()
    try:
        page = renderer.new_page(doc, spec)
        y = RAW_TOP
        for line in lines:
            if y > RAW_LIMIT:
                page = renderer.new_page(doc, spec)
                y = RAW_TOP
            renderer.text_at(page, (RAW_RIGHT - RAW_WIDTH, y - RAW_LINE / 2,
                                    RAW_RIGHT, y + RAW_LINE / 2),
                             line, RAW_SIZE, (0, 0, 0))
            y += RAW_LINE
        page_count = doc.page_count
        data = doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()

    logger.info(f"Rendered raw PDF: {len(lines)} lines on {page_count} page(s)")
    return data
