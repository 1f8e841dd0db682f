"""Tests for the PyMuPDF fixed-page renderer."""

import fitz  # PyMuPDF
import pytest

from block_classify import CONTACT_SECTION_MARKER, Paragraph
from document_model import DocumentModel, Section, parse_document
from export_pdf import (
    DOCUMENT_TITLE, FitzTextMeasurer, FixedPageRenderer, _relative_radius,
    render_pdf, render_text_pdf, resolve_font_path,
)
from page_layout import DrawRect
from utils.arabic_utils import LRI, PDI

E2E_TEXT = f"# Intro\nHello world\n# {CONTACT_SECTION_MARKER}\nالاسم: Ali\nالجهة: Acme\n"


def open_pdf(data):
    return fitz.open(stream=data, filetype="pdf")


@pytest.fixture
def painted_pages(monkeypatch):
    """Record which pages receive the header band and the footer caption."""
    calls = {"header": [], "footer": []}

    def header(self, page, spec, title):
        calls["header"].append(page.number)

    def footer(self, page, spec, caption):
        calls["footer"].append(page.number)

    monkeypatch.setattr(FixedPageRenderer, "header", header)
    monkeypatch.setattr(FixedPageRenderer, "footer", footer)
    return calls


def long_model(n=150):
    return DocumentModel(sections=(
        Section("T", tuple(Paragraph(f"line {i}") for i in range(n))),
    ))


def test_end_to_end_renders_one_page():
    doc = open_pdf(render_pdf(parse_document(E2E_TEXT)))
    try:
        assert doc.page_count == 1
        text = doc[0].get_text()
        assert "Hello" in text
        assert "Ali" in text and "Acme" in text
        assert doc.metadata["title"] == DOCUMENT_TITLE
    finally:
        doc.close()


def test_page_is_a4():
    doc = open_pdf(render_pdf(parse_document(E2E_TEXT)))
    try:
        rect = doc[0].rect
        assert rect.width == pytest.approx(595.28, abs=0.5)
        assert rect.height == pytest.approx(841.89, abs=0.5)
    finally:
        doc.close()


def test_long_document_spans_pages():
    doc = open_pdf(render_pdf(long_model()))
    try:
        assert doc.page_count > 1
    finally:
        doc.close()


def test_header_on_first_page_footer_on_last(painted_pages):
    doc = open_pdf(render_pdf(long_model()))
    try:
        last = doc.page_count - 1
    finally:
        doc.close()
    assert painted_pages["header"] == [0]
    assert painted_pages["footer"] == [last]


def test_empty_model_still_renders_header_and_footer(painted_pages):
    doc = open_pdf(render_pdf(DocumentModel()))
    try:
        assert doc.page_count == 1
    finally:
        doc.close()
    assert painted_pages["header"] == [0]
    assert painted_pages["footer"] == [0]


def test_email_cell_is_drawn_left_to_right():
    text = f"# {CONTACT_SECTION_MARKER}\nالاسم: Ali\na@x.io"
    doc = open_pdf(render_pdf(parse_document(text)))
    try:
        assert "a@x.io" in doc[0].get_text()
    finally:
        doc.close()


def test_mirror_mode_renders():
    doc = open_pdf(render_pdf(parse_document(E2E_TEXT), bidi_mode="mirror"))
    try:
        assert doc.page_count == 1
    finally:
        doc.close()


def test_missing_font_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError):
        render_pdf(parse_document(E2E_TEXT), font_path=str(tmp_path / "missing.ttf"))


def test_resolve_font_path_auto_detect():
    path = resolve_font_path(None)
    assert path is None or path.is_file()


def test_measurer_keeps_isolated_runs_whole():
    measurer = FitzTextMeasurer(fitz.Font("helv"))
    run = f"{LRI}050 123 4567{PDI}"
    lines = measurer.wrap(f"رقم {run} هنا", measurer.width(run, 11) + 1, 11)
    assert run in lines


def test_measurer_wraps_long_text():
    measurer = FitzTextMeasurer(fitz.Font("helv"))
    lines = measurer.wrap(" ".join(["word"] * 50), 100, 11)
    assert len(lines) > 1
    assert all(measurer.width(line, 11) <= 100 for line in lines)


def test_measurer_splits_overlong_token():
    measurer = FitzTextMeasurer(fitz.Font("helv"))
    lines = measurer.wrap("x" * 200, 50, 11)
    assert len(lines) > 1
    assert "".join(lines) == "x" * 200


def test_relative_radius_is_clamped():
    assert _relative_radius(DrawRect((0, 0, 10, 10), radius=20)) == 0.5
    assert _relative_radius(DrawRect((0, 0, 100, 40), radius=10)) == pytest.approx(0.25)
    assert _relative_radius(DrawRect((0, 0, 10, 10))) is None


def test_raw_text_export_paginates():
    text = "\n".join(f"line {i}" for i in range(100))
    doc = open_pdf(render_text_pdf(text))
    try:
        assert doc.page_count == 3
        assert "line 0" in doc[0].get_text()
    finally:
        doc.close()


def test_raw_text_export_of_empty_text():
    doc = open_pdf(render_text_pdf(""))
    try:
        assert doc.page_count == 1
    finally:
        doc.close()
