#!/usr/bin/env python3
"""
table_render.py — Contact roster table layout
==============================================

Lays out the Contacts collection as a bordered table on the page surface
of a PageLayoutEngine:

  • 5 fixed columns, right-to-left:   Name | Org | Role | Email | Phone
    (Name is the rightmost column)
  • Header row with its own fill and white bold-size text
  • Body rows alternate fill by index parity: odd indices (2nd, 4th, ...)
    get the alternate fill
  • Missing values render as a dash placeholder
  • Email / phone cells are LTR and left-aligned regardless of page
    direction; they hold Latin-script data

Pagination: the table is break-atomic.  If it does not fit below the
cursor but fits on a fresh page, the whole table moves to the next page.
A table taller than a whole page is split at row boundaries and the header
row is repeated on each continuation page.

Usage:
    from table_render import layout_contact_table
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from block_classify import FieldKind
from contact_aggregate import Contact
from page_layout import (
    BORDER_COLOR, EMERALD, ROW_ALT_BG, ROW_BG, TEXT_COLOR, WHITE,
    DrawLine, DrawRect, DrawText, PageLayoutEngine,
)
from utils.arabic_utils import strip_marks

# ────────────────────────────────────────────────────────────────────
#  Config
# ────────────────────────────────────────────────────────────────────
CONTACT_COLUMNS: Tuple[FieldKind, ...] = (
    FieldKind.NAME,
    FieldKind.ORG,
    FieldKind.ROLE,
    FieldKind.EMAIL,
    FieldKind.PHONE,
)

COLUMN_TITLES: Dict[FieldKind, str] = {
    FieldKind.NAME:  "الاسم",
    FieldKind.ORG:   "الجهة",
    FieldKind.ROLE:  "الصفة / الدور",
    FieldKind.EMAIL: "البريد الإلكتروني",
    FieldKind.PHONE: "الهاتف",
}

LTR_COLUMNS = {FieldKind.EMAIL, FieldKind.PHONE}
PLACEHOLDER = "-"


def cell_text(contact: Contact, kind: FieldKind) -> str:
    value = contact.get(kind)
    if not value:
        return PLACEHOLDER
    return strip_marks(value) if kind in LTR_COLUMNS else value


def column_bounds(left: float, right: float,
                  n: int = len(CONTACT_COLUMNS)) -> List[Tuple[float, float]]:
    """Equal-width columns, first column on the right."""
    w = (right - left) / n
    return [(right - (i + 1) * w, right - i * w) for i in range(n)]


# ────────────────────────────────────────────────────────────────────
#  Layout
# ────────────────────────────────────────────────────────────────────
def _wrap_cells(engine: PageLayoutEngine, texts: Sequence[str],
                bounds: List[Tuple[float, float]], size: float) -> List[List[str]]:
    pad = engine.style.cell_padding
    return [engine.wrap(t, (x1 - x0) - 2 * pad, size)
            for t, (x0, x1) in zip(texts, bounds)]


def _row_height(engine: PageLayoutEngine, cells: List[List[str]]) -> float:
    st = engine.style
    lines = max(len(c) for c in cells)
    return max(st.table_min_row, lines * st.table_line_height + 2 * st.cell_padding)


def _draw_row(engine: PageLayoutEngine, cells: List[List[str]],
              bounds: List[Tuple[float, float]], height: float, *,
              fill, role: str, text_role: str, size: float, color,
              ltr_columns: Sequence[bool]) -> None:
    st = engine.style
    sp = engine.spec
    y0 = engine.cursor.y
    y1 = y0 + height

    engine.emit(DrawRect((sp.left, y0, sp.right, y1), fill=fill,
                         stroke=BORDER_COLOR, role=role))
    for x0, _ in bounds[:-1]:
        engine.emit(DrawLine((x0, y0), (x0, y1), BORDER_COLOR, role="table-grid"))

    for lines, (x0, x1), ltr in zip(cells, bounds, ltr_columns):
        ty = y0 + st.cell_padding
        for line in lines:
            engine.emit(DrawText(
                (x0 + st.cell_padding, ty, x1 - st.cell_padding, ty + st.table_line_height),
                line, size, color,
                align="left" if ltr else "right",
                rtl=not ltr,
                role=text_role,
            ))
            ty += st.table_line_height

    engine.advance(height)


@dataclass
class TablePlan:
    """Wrapped cells and row heights, measured before anything is drawn."""
    bounds: List[Tuple[float, float]]
    header_cells: List[List[str]]
    header_height: float
    rows: List[Tuple[List[List[str]], float]]

    @property
    def total_height(self) -> float:
        return self.header_height + sum(h for _, h in self.rows)

    @property
    def lead_height(self) -> float:
        """Header plus the first body row."""
        return self.header_height + (self.rows[0][1] if self.rows else 0)

    def keep_height(self, available: float) -> float:
        """Height that must stay together: the whole table when it fits in
        `available`, otherwise header plus first row."""
        total = self.total_height
        return total if total <= available else self.lead_height


def plan_contact_table(engine: PageLayoutEngine, contacts: Sequence[Contact]) -> TablePlan:
    st = engine.style
    sp = engine.spec
    bounds = column_bounds(sp.left, sp.right)

    header_cells = _wrap_cells(
        engine, [COLUMN_TITLES[k] for k in CONTACT_COLUMNS], bounds, st.table_header_size
    )
    rows = []
    for contact in contacts:
        cells = _wrap_cells(
            engine, [cell_text(contact, k) for k in CONTACT_COLUMNS], bounds, st.table_size
        )
        rows.append((cells, _row_height(engine, cells)))

    return TablePlan(bounds, header_cells, _row_height(engine, header_cells), rows)


def layout_contact_table(engine: PageLayoutEngine, contacts: Sequence[Contact],
                         plan: Optional[TablePlan] = None,
                         available: Optional[float] = None) -> None:
    """Emit the contact table at the engine cursor.

    `available` is the page height the table may claim as one unit,
    a fresh page by default.
    """
    st = engine.style
    plan = plan or plan_contact_table(engine, contacts)
    bounds = plan.bounds
    ltr_flags = [k in LTR_COLUMNS for k in CONTACT_COLUMNS]

    def header() -> None:
        _draw_row(engine, plan.header_cells, bounds, plan.header_height,
                  fill=EMERALD, role="table-header", text_role="table-header-cell",
                  size=st.table_header_size, color=WHITE,
                  ltr_columns=[False] * len(CONTACT_COLUMNS))

    if available is None:
        available = engine.fresh_page_height
    engine.ensure_space(plan.keep_height(available))

    header()
    for idx, (cells, height) in enumerate(plan.rows):
        if not engine.fits(height):
            engine.page_break()
            header()
        alt = idx % 2 == 1
        _draw_row(engine, cells, bounds, height,
                  fill=ROW_ALT_BG if alt else ROW_BG,
                  role="table-row-alt" if alt else "table-row",
                  text_role="table-cell", size=st.table_size, color=TEXT_COLOR,
                  ltr_columns=ltr_flags)

    engine.advance(st.table_gap)
