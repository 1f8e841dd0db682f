"""Tests for the document model builder."""

import pytest

from block_classify import (
    CONTACT_SECTION_MARKER, ClassifierOptions, ContactField, FieldKind,
    Heading, LabelValue, ListItem, ListMarker, Paragraph,
)
from contact_aggregate import Contact
from document_model import Section, build, parse_document

E2E_TEXT = f"# Intro\nHello world\n# {CONTACT_SECTION_MARKER}\nالاسم: Ali\nالجهة: Acme\n"


def test_section_ownership():
    model = build([
        Heading(1, "T1"), Paragraph("p1"),
        Heading(1, "T2"), Paragraph("p2"),
    ])
    assert model.sections == (
        Section("T1", (Paragraph("p1"),)),
        Section("T2", (Paragraph("p2"),)),
    )


def test_leading_content_goes_to_untitled_section():
    model = build([Paragraph("مقدمة"), Heading(1, "T1")])
    assert model.sections[0] == Section("", (Paragraph("مقدمة"),))
    assert model.sections[1].title == "T1"


def test_no_untitled_section_without_leading_content():
    model = build([Heading(1, "T1"), Paragraph("p")])
    assert [s.title for s in model.sections] == ["T1"]


def test_contact_heading_is_not_a_section():
    model = build([
        Heading(1, "T1"),
        Heading(2, CONTACT_SECTION_MARKER, opens_contacts=True),
        ContactField(FieldKind.NAME, "A"),
        Heading(1, "T2"),
    ])
    assert [s.title for s in model.sections] == ["T1", "T2"]
    assert model.contact_title == CONTACT_SECTION_MARKER
    assert model.contact_index == 1
    assert model.contacts == (Contact(name="A"),)


def test_heading_closes_contact_group():
    model = build([
        Heading(0, CONTACT_SECTION_MARKER, opens_contacts=True),
        ContactField(FieldKind.ORG, "X"),
        Heading(0, CONTACT_SECTION_MARKER, opens_contacts=True),
        ContactField(FieldKind.PHONE, "555"),
    ])
    assert model.contacts == (Contact(org="X"), Contact(phone="555"))


def test_non_field_lines_in_contact_section_become_notes():
    model = build([
        Heading(0, CONTACT_SECTION_MARKER, opens_contacts=True),
        ContactField(FieldKind.NAME, "A"),
        Paragraph("للتواصل خلال الدوام"),
    ])
    assert model.contact_notes == (Paragraph("للتواصل خلال الدوام"),)
    assert model.sections == ()


def test_end_to_end_scenario():
    model = parse_document(E2E_TEXT)
    assert len(model.sections) == 1
    assert model.sections[0].title == "Intro"
    assert model.sections[0].items == (Paragraph("Hello world", line=1),)
    assert model.contacts == (Contact(name="Ali", org="Acme"),)


def test_item_kinds_survive_parsing():
    model = parse_document("# البنود\n- أولاً\n- المدة: سنة\n2. ثانياً\nفقرة")
    items = model.sections[0].items
    assert isinstance(items[0], ListItem) and items[0].marker is ListMarker.BULLET
    assert isinstance(items[1], LabelValue)
    assert items[2].marker is ListMarker.NUMBERED and items[2].index == 2
    assert isinstance(items[3], Paragraph)


def test_empty_input_gives_empty_model():
    for text in (None, "", "\n\n  \n"):
        model = parse_document(text)
        assert model.is_empty
        assert model.sections == () and model.contacts == ()


def test_stray_contacts_option_reaches_classifier():
    text = "# T\nالاسم: أحمد"
    assert parse_document(text).contacts == ()
    model = parse_document(text, ClassifierOptions(stray_contacts=True))
    assert model.contacts == (Contact(name="أحمد"),)
    assert model.sections[0].items == ()


def test_to_dict_is_json_ready():
    data = parse_document(E2E_TEXT).to_dict()
    assert data["sections"] == [{
        "title": "Intro",
        "items": [{"type": "paragraph", "text": "Hello world"}],
    }]
    assert data["contacts"][0]["name"] == "Ali"
    assert data["contact_title"] == CONTACT_SECTION_MARKER
    assert data["contact_index"] == 1


@pytest.mark.parametrize("line, number", [
    ("3- 2024 سنة الاتفاق", 3),
    ("10) 15 يوماً من تاريخ التوقيع", 10),
])
def test_numbered_item_survives_normalization(line, number):
    item = parse_document(f"# T\n{line}").sections[0].items[0]
    assert isinstance(item, ListItem)
    assert item.marker is ListMarker.NUMBERED
    assert item.index == number


@pytest.mark.parametrize("marker_line", [
    f"**{CONTACT_SECTION_MARKER}**",
    f"{CONTACT_SECTION_MARKER} للطرفين",
])
def test_marker_inside_a_longer_line_keeps_contacts(marker_line):
    model = parse_document(f"# Intro\nx\n{marker_line}\nالاسم: Ali\nالجهة: Acme\n")
    assert model.contacts == (Contact(name="Ali", org="Acme"),)
    assert model.sections[0].items == (Paragraph("x", line=1),)
    assert model.contact_index == 1
