#!/usr/bin/env python3
"""
page_layout.py — Fixed-page layout of a DocumentModel
======================================================

Walks the DocumentModel and emits draw commands against virtual A4 pages,
tracking a LayoutCursor (page index + vertical position).  All coordinates
are PDF points, origin top-left, y growing downward.  Writing direction is
right-to-left: headings, bullets and labels sit on the right edge.

Pagination
----------
Before drawing, every unit computes its required height and checks

    cursor.y + required > page.height - margin   →   page break

  • Heading boxes and the contact table are break-ATOMIC: the check covers
    the whole unit, so a heading box or a table that fits on one page is
    never split.
  • Paragraph, list and label/value text is break-GRANULAR: each wrapped
    line is checked on its own and may move to the next page mid-paragraph.
  • A unit taller than a whole page is placed at the top of a fresh page
    anyway (tables split at row boundaries, see table_render.py).

Text measurement is NOT done here.  The caller supplies a TextMeasurer
(wrap text to a width, measure a string); the engine only consumes line
counts and widths.

Usage:
    from page_layout import layout, PageSpec
    result = layout(model, PageSpec(), measurer)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple, Union

from block_classify import LabelValue, ListItem, ListMarker
from document_model import DocumentModel, Section, SectionItem

logger = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────────
#  Config
# ────────────────────────────────────────────────────────────────────
MM = 72.0 / 25.4                # 1 mm in PDF points

A4_WIDTH       = 595.28
A4_HEIGHT      = 841.89
DEFAULT_MARGIN = 20 * MM

DEFAULT_CONTACT_TITLE = "بيانات منسقي الاتصال"

RGB = Tuple[float, float, float]
Rect = Tuple[float, float, float, float]   # x0, y0, x1, y1


def rgb(r: int, g: int, b: int) -> RGB:
    return (r / 255.0, g / 255.0, b / 255.0)


# Palette
EMERALD      = rgb(16, 185, 129)
DARK_GREEN   = rgb(6, 95, 70)
DEEP_GREEN   = rgb(4, 120, 87)
MINT         = rgb(52, 211, 153)
MINT_BG      = rgb(236, 253, 245)
TEXT_COLOR   = rgb(30, 41, 59)
LABEL_COLOR  = rgb(55, 65, 81)
ROW_BG       = rgb(248, 250, 252)
ROW_ALT_BG   = rgb(240, 253, 244)
BORDER_COLOR = rgb(209, 213, 219)
MUTED_COLOR  = rgb(100, 116, 139)
WHITE        = (1.0, 1.0, 1.0)


@dataclass(frozen=True)
class PageSpec:
    width: float = A4_WIDTH
    height: float = A4_HEIGHT
    margin: float = DEFAULT_MARGIN
    first_page_top: Optional[float] = None  # page-1 start y (header band reserve)

    @property
    def left(self) -> float:
        return self.margin

    @property
    def right(self) -> float:
        return self.width - self.margin

    @property
    def bottom(self) -> float:
        return self.height - self.margin

    @property
    def content_width(self) -> float:
        return self.right - self.left

    def top(self, page_index: int) -> float:
        if page_index == 0 and self.first_page_top is not None:
            return self.first_page_top
        return self.margin


@dataclass(frozen=True)
class LayoutStyle:
    body_size: float = 11.0
    heading_size: float = 14.0
    table_size: float = 10.0
    table_header_size: float = 11.0

    line_height: float = 6 * MM
    paragraph_gap: float = 2 * MM
    section_gap: float = 10 * MM

    heading_height: float = 14 * MM
    heading_after: float = 4 * MM
    heading_radius: float = 3 * MM
    accent_width: float = 4 * MM
    heading_inset: float = 8 * MM

    bullet_indent: float = 10 * MM
    bullet_offset: float = 5 * MM
    bullet_radius: float = 1.2 * MM

    label_gap: float = 3 * MM
    label_max_ratio: float = 0.35

    cell_padding: float = 2 * MM
    table_line_height: float = 5 * MM
    table_min_row: float = 9 * MM
    table_gap: float = 5 * MM


DEFAULT_STYLE = LayoutStyle()


class TextMeasurer(Protocol):
    """Measure & wrap capability of the rendering back end."""

    def wrap(self, text: str, width: float, size: float) -> List[str]:
        ...

    def width(self, text: str, size: float) -> float:
        ...


# ────────────────────────────────────────────────────────────────────
#  Draw Commands
# ────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class DrawRect:
    rect: Rect
    fill: Optional[RGB] = None
    stroke: Optional[RGB] = None
    radius: float = 0.0
    role: str = ""


@dataclass(frozen=True)
class DrawCircle:
    center: Tuple[float, float]
    radius: float
    fill: RGB
    role: str = ""


@dataclass(frozen=True)
class DrawLine:
    start: Tuple[float, float]
    end: Tuple[float, float]
    color: RGB
    width: float = 0.5
    role: str = ""


@dataclass(frozen=True)
class DrawText:
    """One line of logical-order text, aligned inside rect."""
    rect: Rect
    text: str
    size: float
    color: RGB = TEXT_COLOR
    align: str = "right"        # "right" | "left" | "center"
    rtl: bool = True
    role: str = ""


@dataclass(frozen=True)
class PageBreak:
    page_index: int             # index of the page that starts here
    role: str = "page-break"


DrawCommand = Union[DrawRect, DrawCircle, DrawLine, DrawText, PageBreak]


@dataclass
class LayoutCursor:
    page_index: int = 0
    y: float = 0.0


@dataclass
class LayoutResult:
    commands: List[Tuple[int, DrawCommand]] = field(default_factory=list)
    page_count: int = 1

    @property
    def page_breaks(self) -> int:
        return sum(1 for _, c in self.commands if isinstance(c, PageBreak))

    def on_page(self, page_index: int) -> List[DrawCommand]:
        return [c for p, c in self.commands if p == page_index]

    def with_role(self, role: str) -> List[DrawCommand]:
        return [c for _, c in self.commands if c.role == role]


# ────────────────────────────────────────────────────────────────────
#  Engine
# ────────────────────────────────────────────────────────────────────
class PageLayoutEngine:
    """One render pass.  Owns its cursor; never shared between passes."""

    def __init__(self, spec: PageSpec, measurer: TextMeasurer,
                 style: LayoutStyle = DEFAULT_STYLE):
        self.spec = spec
        self.measurer = measurer
        self.style = style
        self.cursor = LayoutCursor(0, spec.top(0))
        self.result = LayoutResult()

    # ── cursor / pagination ────────────────────────────────────────
    @property
    def at_page_top(self) -> bool:
        return self.cursor.y <= self.spec.top(self.cursor.page_index)

    @property
    def fresh_page_height(self) -> float:
        """Usable height of a page after a break."""
        return self.spec.bottom - self.spec.margin

    def fits(self, height: float) -> bool:
        return self.cursor.y + height <= self.spec.bottom

    def page_break(self) -> None:
        self.cursor.page_index += 1
        self.cursor.y = self.spec.top(self.cursor.page_index)
        self.result.page_count = self.cursor.page_index + 1
        self.emit(PageBreak(self.cursor.page_index))

    def ensure_space(self, height: float) -> None:
        """Atomic check-then-break for a unit of the given height."""
        if not self.fits(height) and not self.at_page_top:
            self.page_break()

    def emit(self, command: DrawCommand) -> None:
        self.result.commands.append((self.cursor.page_index, command))

    def advance(self, dy: float) -> None:
        self.cursor.y += dy

    # ── text helpers ───────────────────────────────────────────────
    def wrap(self, text: str, width: float, size: float) -> List[str]:
        return self.measurer.wrap(text, width, size) or [""]

    # ── units ──────────────────────────────────────────────────────
    def heading_box(self, title: str) -> None:
        st = self.style
        sp = self.spec
        # Keep the box together with the first line that follows it
        self.ensure_space(st.heading_height + st.heading_after + st.line_height)

        y0 = self.cursor.y
        y1 = y0 + st.heading_height
        self.emit(DrawRect((sp.left, y0, sp.right, y1), fill=MINT_BG,
                           radius=st.heading_radius, role="heading-box"))
        self.emit(DrawRect((sp.right - st.accent_width, y0, sp.right, y1),
                           fill=EMERALD, radius=st.accent_width / 2,
                           role="heading-accent"))
        self.emit(DrawText((sp.left + st.heading_inset, y0,
                            sp.right - st.heading_inset, y1),
                           title, st.heading_size, DARK_GREEN,
                           align="right", role="heading"))
        self.advance(st.heading_height + st.heading_after)

    def text_lines(self, lines: List[str], x0: float, x1: float,
                   role: str, first_line_hook=None) -> None:
        """Break-granular: each wrapped line is checked on its own."""
        st = self.style
        for i, line in enumerate(lines):
            self.ensure_space(st.line_height)
            if i == 0 and first_line_hook is not None:
                first_line_hook(self.cursor.y)
            self.emit(DrawText((x0, self.cursor.y, x1, self.cursor.y + st.line_height),
                               line, st.body_size, TEXT_COLOR, role=role))
            self.advance(st.line_height)

    def paragraph(self, text: str) -> None:
        sp = self.spec
        lines = self.wrap(text, sp.content_width, self.style.body_size)
        self.text_lines(lines, sp.left, sp.right, "paragraph")
        self.advance(self.style.paragraph_gap)

    def list_item(self, item: ListItem) -> None:
        st = self.style
        sp = self.spec
        text_right = sp.right - st.bullet_indent
        lines = self.wrap(item.text, text_right - sp.left, st.body_size)

        def marker(y: float) -> None:
            if item.marker is ListMarker.NUMBERED:
                self.emit(DrawText((text_right, y, sp.right, y + st.line_height),
                                   f"{item.index}.", st.body_size, EMERALD,
                                   role="list-number"))
            else:
                self.emit(DrawCircle((sp.right - st.bullet_offset,
                                      y + st.line_height / 2),
                                     st.bullet_radius, EMERALD, role="bullet"))

        self.text_lines(lines, sp.left, text_right, "list-item", marker)
        self.advance(st.paragraph_gap)

    def label_value(self, item: LabelValue) -> None:
        st = self.style
        sp = self.spec
        label = f"{item.label}:"
        label_w = min(self.measurer.width(label, st.body_size),
                      sp.content_width * st.label_max_ratio)
        value_right = sp.right - label_w - st.label_gap
        label_lines = self.wrap(label, label_w, st.body_size)
        value_lines = self.wrap(item.value, value_right - sp.left, st.body_size)

        for i in range(max(len(label_lines), len(value_lines))):
            self.ensure_space(st.line_height)
            y0 = self.cursor.y
            y1 = y0 + st.line_height
            if i < len(label_lines):
                self.emit(DrawText((sp.right - label_w, y0, sp.right, y1),
                                   label_lines[i], st.body_size, LABEL_COLOR,
                                   role="label"))
            if i < len(value_lines):
                self.emit(DrawText((sp.left, y0, value_right, y1),
                                   value_lines[i], st.body_size, TEXT_COLOR,
                                   role="value"))
            self.advance(st.line_height)
        self.advance(st.paragraph_gap)

    def item(self, item: SectionItem) -> None:
        if isinstance(item, ListItem):
            self.list_item(item)
        elif isinstance(item, LabelValue):
            self.label_value(item)
        else:
            self.paragraph(item.text)

    def section(self, section: Section) -> None:
        if section.title:
            self.heading_box(section.title)
        for item in section.items:
            self.item(item)
        self.advance(self.style.section_gap)

    def contact_section(self, model: DocumentModel) -> None:
        from table_render import layout_contact_table, plan_contact_table

        plan = plan_contact_table(self, model.contacts) if model.contacts else None
        heading = self.style.heading_height + self.style.heading_after
        available = self.fresh_page_height - heading
        if plan is not None:
            # Heading moves with the table, never left alone at a page bottom
            self.ensure_space(heading + plan.keep_height(available))

        self.heading_box(model.contact_title or DEFAULT_CONTACT_TITLE)
        if plan is not None:
            layout_contact_table(self, model.contacts, plan, available)
        for item in model.contact_notes:
            self.item(item)
        self.advance(self.style.section_gap)


def layout(
    model: DocumentModel,
    spec: PageSpec,
    measurer: TextMeasurer,
    style: LayoutStyle = DEFAULT_STYLE,
) -> LayoutResult:
    """Lay out the whole model.  Returns commands tagged with page index."""
    engine = PageLayoutEngine(spec, measurer, style)

    has_contacts = bool(model.contacts or model.contact_title or model.contact_notes)
    contact_at = model.contact_index if model.contact_index is not None else len(model.sections)

    for i, section in enumerate(model.sections):
        if has_contacts and i == contact_at:
            engine.contact_section(model)
        engine.section(section)
    if has_contacts and contact_at >= len(model.sections):
        engine.contact_section(model)

    result = engine.result
    logger.info(
        f"Laid out {len(model.sections)} sections on {result.page_count} page(s), "
        f"{result.page_breaks} page break(s)"
    )
    return result
