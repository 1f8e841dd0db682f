"""Tests for the python-docx flowed renderer."""

import io

from docx import Document
from docx.oxml.ns import qn

from block_classify import CONTACT_SECTION_MARKER
from contact_aggregate import Contact
from document_model import DocumentModel, parse_document
from export_docx import DOCUMENT_TITLE, FONT_SIZE, render_docx, render_text_docx
from table_render import COLUMN_TITLES, CONTACT_COLUMNS, PLACEHOLDER

E2E_TEXT = f"# Intro\nHello world\n# {CONTACT_SECTION_MARKER}\nالاسم: Ali\nالجهة: Acme\n"


def open_docx(data):
    return Document(io.BytesIO(data))


def body_paragraphs(doc):
    return [p for p in doc.paragraphs if p.text]


def is_bidi(paragraph):
    pPr = paragraph._p.pPr
    return pPr is not None and pPr.find(qn("w:bidi")) is not None


def cell_fill(cell):
    shd = cell._tc.tcPr.find(qn("w:shd"))
    return shd.get(qn("w:fill"))


def test_end_to_end_document_structure():
    doc = open_docx(render_docx(parse_document(E2E_TEXT)))
    texts = [p.text for p in body_paragraphs(doc)]
    assert texts == [DOCUMENT_TITLE, "Intro", "Hello world", CONTACT_SECTION_MARKER]
    assert len(doc.tables) == 1


def test_every_paragraph_is_bidi_and_every_run_sized():
    doc = open_docx(render_docx(parse_document(
        "# البنود\n- أولاً\n- المدة: سنة\n2. ثانياً\nفقرة عادية")))
    for paragraph in body_paragraphs(doc):
        assert is_bidi(paragraph)
        for run in paragraph.runs:
            assert run.font.rtl
            assert run.font.size.pt == FONT_SIZE
            szCs = run._element.rPr.find(qn("w:szCs"))
            assert szCs.get(qn("w:val")) == str(FONT_SIZE * 2)


def test_list_and_label_value_paragraphs():
    doc = open_docx(render_docx(parse_document("# T\n- بند\n- المدة: سنة\n3. ثالثاً")))
    texts = [p.text for p in body_paragraphs(doc)]
    assert "المدة: سنة" in texts
    assert "3. ثالثاً" in texts
    bullet = next(p for p in doc.paragraphs if p.text == "بند")
    assert bullet.style.name == "List Bullet"
    label_run = next(p for p in doc.paragraphs if p.text == "المدة: سنة").runs[0]
    assert label_run.bold


def test_contact_table_rows_columns_and_fills():
    contacts = tuple(Contact(name=f"N{i}", phone=f"55{i}") for i in range(4))
    model = DocumentModel(contacts=contacts, contact_title=CONTACT_SECTION_MARKER,
                          contact_index=0)
    table = open_docx(render_docx(model)).tables[0]

    assert len(table.rows) == 5
    assert [c.text for c in table.rows[0].cells] == [COLUMN_TITLES[k] for k in CONTACT_COLUMNS]
    assert table.rows[1].cells[0].text == "N0"
    assert table.rows[1].cells[1].text == PLACEHOLDER
    assert table._tbl.tblPr.find(qn("w:bidiVisual")) is not None

    fills = [cell_fill(row.cells[0]) for row in table.rows[1:]]
    assert fills[0] == fills[2] and fills[1] == fills[3]
    assert fills[0] != fills[1]


def test_phone_cell_is_left_to_right():
    model = DocumentModel(contacts=(Contact(name="A", phone="0501234567"),),
                          contact_index=0)
    table = open_docx(render_docx(model)).tables[0]
    phone_run = table.rows[1].cells[4].paragraphs[0].runs[0]
    assert not phone_run.font.rtl


def test_footer_caption():
    doc = open_docx(render_docx(DocumentModel(), footer="تذييل"))
    assert doc.sections[0].footer.paragraphs[0].text == "تذييل"


def test_raw_text_one_paragraph_per_line():
    doc = open_docx(render_text_docx("سطر أول\n\nسطر ثالث"))
    assert [p.text for p in doc.paragraphs] == ["سطر أول", "", "سطر ثالث"]
    assert all(is_bidi(p) for p in doc.paragraphs)
    for p in doc.paragraphs:
        for run in p.runs:
            assert run.font.size.pt == FONT_SIZE
