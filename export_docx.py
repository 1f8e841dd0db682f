#!/usr/bin/env python3
"""
export_docx.py — Render a DocumentModel to a flowed DOCX via python-docx.

Word lays the text out itself, so this renderer never touches the page
layout engine.  Every paragraph carries `w:bidi` and right alignment; every
run is RTL with the same size for Latin and complex scripts.  Email and
phone cells in the contact table are the exception: they are LTR runs,
left-aligned.

Usage
-----
    from export_docx import render_docx, render_text_docx
    docx_bytes = render_docx(model)
    docx_bytes = render_text_docx(raw_text)   # one paragraph per line
"""

import io
import logging
from typing import Optional, Sequence

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from block_classify import LabelValue, ListItem, ListMarker
from contact_aggregate import Contact
from document_model import DocumentModel, Section, SectionItem
from page_layout import DEFAULT_CONTACT_TITLE
from table_render import COLUMN_TITLES, CONTACT_COLUMNS, LTR_COLUMNS, cell_text

logger = logging.getLogger(__name__)


# ─── Configuration ──────────────────────────────────────────────────────────

DOCUMENT_TITLE  = "مذكرة تفاهم"
FOOTER_CAPTION  = "تم إنشاء هذا المستند تلقائيًا"
FONT_NAME       = "Arial"
FONT_SIZE       = 14           # points; 28 half-points

HEADER_FILL     = "10B981"
ROW_FILL        = "F8FAFC"
ROW_ALT_FILL    = "F0FDF4"
HEADING_COLOR   = RGBColor(0x06, 0x5F, 0x46)
LABEL_COLOR     = RGBColor(0x37, 0x41, 0x51)
WHITE           = RGBColor(0xFF, 0xFF, 0xFF)

# rPr children that must follow w:szCs
_SZCS_SUCCESSORS = (
    "w:highlight", "w:u", "w:effect", "w:bdr", "w:shd", "w:fitText",
    "w:vertAlign", "w:rtl", "w:cs", "w:em", "w:lang", "w:eastAsianLayout",
    "w:specVanish", "w:oMath",
)

# tblPr children that must follow w:bidiVisual
_BIDI_VISUAL_SUCCESSORS = (
    "w:tblStyleRowBandSize", "w:tblStyleColBandSize", "w:tblW", "w:jc",
    "w:tblCellSpacing", "w:tblInd", "w:tblBorders", "w:shd", "w:tblLayout",
    "w:tblCellMar", "w:tblLook", "w:tblCaption", "w:tblDescription",
)


# ─── XML helpers ────────────────────────────────────────────────────────────

def set_paragraph_rtl(paragraph, alignment=WD_ALIGN_PARAGRAPH.RIGHT) -> None:
    """Mark the paragraph bidirectional, then align it."""
    pPr = paragraph._p.get_or_add_pPr()
    if pPr.find(qn("w:bidi")) is None:
        bidi = OxmlElement("w:bidi")
        bidi.set(qn("w:val"), "1")
        pPr.append(bidi)
    paragraph.alignment = alignment


def set_run_font(run, size: int = FONT_SIZE, bold: bool = False,
                 color: Optional[RGBColor] = None, rtl: bool = True) -> None:
    """Font, size and direction for Latin and complex-script text alike."""
    run.font.name = FONT_NAME
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.rtl = rtl
    if color is not None:
        run.font.color.rgb = color

    rPr = run._element.get_or_add_rPr()
    rPr.get_or_add_rFonts().set(qn("w:cs"), FONT_NAME)
    if bold:
        run.font.cs_bold = True

    szCs = rPr.find(qn("w:szCs"))
    if szCs is None:
        szCs = OxmlElement("w:szCs")
        rPr.insert_element_before(szCs, *_SZCS_SUCCESSORS)
    szCs.set(qn("w:val"), str(size * 2))


def add_run(paragraph, text: str, **font) -> None:
    set_run_font(paragraph.add_run(text), **font)


def setup_table_bidi(table) -> None:
    """Visual right-to-left column order: column 0 is rightmost."""
    tblPr = table._tbl.tblPr
    if tblPr.find(qn("w:bidiVisual")) is None:
        tblPr.insert_element_before(OxmlElement("w:bidiVisual"),
                                    *_BIDI_VISUAL_SUCCESSORS)


def shade_cell(cell, fill: str) -> None:
    tcPr = cell._tc.get_or_add_tcPr()
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    tcPr.append(shd)


# ─── Builders ───────────────────────────────────────────────────────────────

def _text_paragraph(doc, text: str, **font):
    p = doc.add_paragraph()
    set_paragraph_rtl(p)
    add_run(p, text, **font)
    return p


def _heading(doc, text: str, level: int = 2):
    h = doc.add_heading(level=level)
    set_paragraph_rtl(h)
    add_run(h, text, bold=True, color=HEADING_COLOR)
    return h


def _item(doc, item: SectionItem) -> None:
    if isinstance(item, ListItem):
        if item.marker is ListMarker.NUMBERED:
            # Source numbering is kept as written, not renumbered by Word
            p = doc.add_paragraph()
            set_paragraph_rtl(p)
            add_run(p, f"{item.index}. {item.text}")
        else:
            p = doc.add_paragraph(style="List Bullet")
            set_paragraph_rtl(p)
            add_run(p, item.text)
    elif isinstance(item, LabelValue):
        p = doc.add_paragraph()
        set_paragraph_rtl(p)
        add_run(p, f"{item.label}: ", bold=True, color=LABEL_COLOR)
        add_run(p, item.value)
    else:
        _text_paragraph(doc, item.text)


def _section(doc, section: Section) -> None:
    if section.title:
        _heading(doc, section.title)
    for item in section.items:
        _item(doc, item)


def _fill_cell(cell, text: str, ltr: bool = False, **font) -> None:
    p = cell.paragraphs[0]
    set_paragraph_rtl(p, WD_ALIGN_PARAGRAPH.LEFT if ltr else WD_ALIGN_PARAGRAPH.RIGHT)
    add_run(p, text, rtl=not ltr, **font)


def _contact_table(doc, contacts: Sequence[Contact]):
    table = doc.add_table(rows=1, cols=len(CONTACT_COLUMNS))
    table.style = "Table Grid"
    setup_table_bidi(table)

    for cell, kind in zip(table.rows[0].cells, CONTACT_COLUMNS):
        shade_cell(cell, HEADER_FILL)
        _fill_cell(cell, COLUMN_TITLES[kind], bold=True, color=WHITE)

    for idx, contact in enumerate(contacts):
        fill = ROW_ALT_FILL if idx % 2 == 1 else ROW_FILL
        for cell, kind in zip(table.add_row().cells, CONTACT_COLUMNS):
            shade_cell(cell, fill)
            _fill_cell(cell, cell_text(contact, kind), ltr=kind in LTR_COLUMNS)
    return table


def _contact_section(doc, model: DocumentModel) -> None:
    _heading(doc, model.contact_title or DEFAULT_CONTACT_TITLE)
    if model.contacts:
        _contact_table(doc, model.contacts)
    for item in model.contact_notes:
        _item(doc, item)


def _footer(doc, caption: str) -> None:
    p = doc.sections[0].footer.paragraphs[0]
    set_paragraph_rtl(p, WD_ALIGN_PARAGRAPH.CENTER)
    add_run(p, caption)


def _to_bytes(doc) -> bytes:
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


# ─── Public API ─────────────────────────────────────────────────────────────

def render_docx(
    model: DocumentModel,
    title: str = DOCUMENT_TITLE,
    footer: str = FOOTER_CAPTION,
) -> bytes:
    """Render the structured model to DOCX bytes."""
    doc = Document()
    doc.core_properties.title = title

    t = doc.add_heading(level=1)
    set_paragraph_rtl(t, WD_ALIGN_PARAGRAPH.CENTER)
    add_run(t, title, bold=True, color=HEADING_COLOR)

    has_contacts = bool(model.contacts or model.contact_title or model.contact_notes)
    contact_at = model.contact_index if model.contact_index is not None else len(model.sections)

    for i, section in enumerate(model.sections):
        if has_contacts and i == contact_at:
            _contact_section(doc, model)
        _section(doc, section)
    if has_contacts and contact_at >= len(model.sections):
        _contact_section(doc, model)

    _footer(doc, footer)

    data = _to_bytes(doc)
    logger.info(f"Rendered DOCX: {len(model.sections)} sections, "
                f"{len(model.contacts)} contacts, {len(data) / 1024:.1f} KB")
    return data


def render_text_docx(text: Optional[str]) -> bytes:
    """Raw export: one right-to-left paragraph per input line."""
    doc = Document()
    for line in (text or "").split("\n"):
        _text_paragraph(doc, line)
    return _to_bytes(doc)
