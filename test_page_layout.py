"""Tests for the fixed-page layout engine and the contact table."""

from block_classify import CONTACT_SECTION_MARKER, LabelValue, ListItem, ListMarker, Paragraph
from contact_aggregate import Contact
from document_model import DocumentModel, Section, parse_document
from page_layout import (
    MM, DrawCircle, DrawRect, DrawText, PageLayoutEngine, PageSpec, layout,
)
from table_render import (
    COLUMN_TITLES, CONTACT_COLUMNS, PLACEHOLDER, column_bounds,
    layout_contact_table,
)


class FakeMeasurer:
    """Monospace metrics: every character is char_width * size wide."""

    def __init__(self, char_width=0.3):
        self.char_width = char_width

    def width(self, text, size):
        return len(text) * size * self.char_width

    def wrap(self, text, width, size):
        lines, cur = [], ""
        for word in text.split():
            candidate = f"{cur} {word}" if cur else word
            if cur and self.width(candidate, size) > width:
                lines.append(cur)
                cur = word
            else:
                cur = candidate
        if cur:
            lines.append(cur)
        return lines


SPEC = PageSpec()


def contacts(n):
    return [Contact(name=f"N{i}", org=f"O{i}", email=f"u{i}@x.com") for i in range(n)]


def texts(result, role):
    return [c.text for c in result.with_role(role)]


def test_long_text_breaks_pages_and_stays_inside_margins():
    model = DocumentModel(sections=(
        Section("T", tuple(Paragraph(f"سطر {i}") for i in range(200))),
    ))
    result = layout(model, SPEC, FakeMeasurer())
    assert result.page_breaks >= 1
    assert result.page_count == result.page_breaks + 1
    for _, command in result.commands:
        if isinstance(command, DrawText):
            assert command.rect[3] <= SPEC.bottom + 1e-6


def test_paragraph_splits_between_lines():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    engine.cursor.y = SPEC.bottom - engine.style.line_height * 1.5
    engine.paragraph(" ".join(["كلمة"] * 200))
    pages = {p for p, c in engine.result.commands if c.role == "paragraph"}
    assert pages == {0, 1}


def test_heading_moves_to_next_page_with_its_first_line():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    engine.cursor.y = SPEC.bottom - 10 * MM
    engine.heading_box("T")
    assert engine.result.page_breaks == 1
    assert engine.result.on_page(1)[1].role == "heading-box"


def test_no_break_at_page_top():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    engine.ensure_space(SPEC.height * 3)
    assert engine.result.page_breaks == 0


def test_first_page_top_reserve():
    spec = PageSpec(first_page_top=50 * MM)
    assert spec.top(0) == 50 * MM
    assert spec.top(1) == spec.margin


def test_table_rows_and_alternation():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    layout_contact_table(engine, contacts(5))
    result = engine.result
    assert len(result.with_role("table-header")) == 1
    body = [c for _, c in result.commands
            if isinstance(c, DrawRect) and c.role in ("table-row", "table-row-alt")]
    assert len(body) == 5
    assert [c.role == "table-row-alt" for c in body] == [False, True, False, True, False]


def test_table_column_order_is_right_to_left():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    layout_contact_table(engine, contacts(1))
    header = sorted(engine.result.with_role("table-header-cell"),
                    key=lambda c: -c.rect[0])
    assert [c.text for c in header] == [COLUMN_TITLES[k] for k in CONTACT_COLUMNS]


def test_column_bounds_first_column_rightmost():
    bounds = column_bounds(0, 100)
    assert bounds[0] == (80, 100)
    assert bounds[-1] == (0, 20)


def test_missing_values_and_ltr_cells():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    layout_contact_table(engine, [Contact(name="A", email="a@x.com")])
    cells = engine.result.with_role("table-cell")
    assert [c.text for c in cells].count(PLACEHOLDER) == 3
    email = next(c for c in cells if c.text == "a@x.com")
    assert email.align == "left" and not email.rtl
    name = next(c for c in cells if c.text == "A")
    assert name.align == "right" and name.rtl


def test_table_moves_whole_to_next_page():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    engine.cursor.y = SPEC.bottom - 30 * MM
    layout_contact_table(engine, contacts(5))
    assert engine.result.page_breaks == 1
    header_page = next(p for p, c in engine.result.commands if c.role == "table-header")
    assert header_page == 1


def test_oversized_table_repeats_header():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    layout_contact_table(engine, contacts(120))
    result = engine.result
    assert result.page_count > 1
    assert len(result.with_role("table-header")) == result.page_count
    rows = result.with_role("table-row") + result.with_role("table-row-alt")
    assert len(rows) == 120
    assert all(c.rect[3] <= SPEC.bottom + 1e-6 for c in rows)


def test_list_markers():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    engine.list_item(ListItem(ListMarker.NUMBERED, "ثانياً", index=2))
    engine.list_item(ListItem(ListMarker.BULLET, "بند"))
    assert texts(engine.result, "list-number") == ["2."]
    bullets = engine.result.with_role("bullet")
    assert len(bullets) == 1 and isinstance(bullets[0], DrawCircle)


def test_label_sits_right_of_value():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    engine.label_value(LabelValue("المدة", "سنة واحدة"))
    label = engine.result.with_role("label")[0]
    value = engine.result.with_role("value")[0]
    assert label.text == "المدة:"
    assert label.rect[2] == SPEC.right
    assert value.rect[2] < label.rect[0]


def test_contact_section_is_placed_at_its_index():
    model = DocumentModel(
        sections=(Section("A", (Paragraph("a"),)), Section("B", (Paragraph("b"),))),
        contacts=(Contact(name="N"),),
        contact_title=CONTACT_SECTION_MARKER,
        contact_index=1,
    )
    result = layout(model, SPEC, FakeMeasurer())
    assert texts(result, "heading") == ["A", CONTACT_SECTION_MARKER, "B"]


def test_contact_notes_follow_table():
    model = DocumentModel(
        contacts=(Contact(name="N"),),
        contact_title=CONTACT_SECTION_MARKER,
        contact_notes=(Paragraph("ملاحظة"),),
        contact_index=0,
    )
    roles = [c.role for _, c in layout(model, SPEC, FakeMeasurer()).commands]
    assert roles.index("table-header") < roles.index("paragraph")


def test_end_to_end_layout_is_one_page():
    text = f"# Intro\nHello world\n# {CONTACT_SECTION_MARKER}\nالاسم: Ali\nالجهة: Acme\n"
    model = parse_document(text)
    result = layout(model, PageSpec(first_page_top=50 * MM), FakeMeasurer())
    assert result.page_count == 1
    assert texts(result, "heading") == ["Intro", CONTACT_SECTION_MARKER]
    assert texts(result, "paragraph") == ["Hello world"]
    assert len(result.with_role("table-header")) == 1
    assert len(result.with_role("table-row")) == 1
    assert result.with_role("table-row-alt") == []


def test_empty_model_lays_out_nothing():
    result = layout(DocumentModel(), SPEC, FakeMeasurer())
    assert result.page_count == 1
    assert result.commands == []


def contact_model(n):
    return DocumentModel(contacts=tuple(contacts(n)),
                         contact_title=CONTACT_SECTION_MARKER, contact_index=0)


def first_page(result, role):
    return next(p for p, c in result.commands if c.role == role)


def test_contact_heading_moves_with_its_table():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    engine.cursor.y = SPEC.bottom - 30 * MM
    engine.contact_section(contact_model(5))
    result = engine.result
    assert result.page_breaks == 1
    assert first_page(result, "heading-box") == 1
    assert first_page(result, "table-header") == 1


def test_contact_heading_stays_with_first_rows_of_long_table():
    engine = PageLayoutEngine(SPEC, FakeMeasurer())
    engine.cursor.y = SPEC.bottom - 60 * MM
    engine.contact_section(contact_model(120))
    result = engine.result
    assert first_page(result, "heading-box") == 0
    assert first_page(result, "table-header") == 0
    assert first_page(result, "table-row") == 0
