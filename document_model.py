#!/usr/bin/env python3
"""
document_model.py — Structured document model built from classified blocks.

    raw text ──normalize──▶ lines ──classify──▶ blocks ──build──▶ DocumentModel

DocumentModel
-------------
  • sections        ordered Sections (title + ListItem/LabelValue/Paragraph items)
  • contacts        ordered Contacts from the contact section
  • contact_title   heading text of the contact section (None if absent)
  • contact_notes   non-field lines found inside the contact section
  • contact_index   number of sections preceding the contact section

Policies:
  • Content before the first heading lands in an implicit untitled Section
    (title ""), created only when such content exists.
  • The contact-section heading does not become a Section.  Its title is
    kept on the model so renderers can attach the contact table to it.
  • ContactFields never enter Section items.

Usage:
    from document_model import build, parse_document, DocumentModel
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from block_classify import (
    Block, ClassifierOptions, ContactField, DEFAULT_OPTIONS, Heading,
    LabelValue, ListItem, Paragraph, classify, split_lines,
)
from contact_aggregate import Contact, ContactAggregator
from utils.arabic_utils import normalize

logger = logging.getLogger(__name__)

SectionItem = Union[ListItem, LabelValue, Paragraph]


# ────────────────────────────────────────────────────────────────────
#  Data Model
# ────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Section:
    title: str
    items: Tuple[SectionItem, ...] = ()


@dataclass(frozen=True)
class DocumentModel:
    sections: Tuple[Section, ...] = ()
    contacts: Tuple[Contact, ...] = ()
    contact_title: Optional[str] = None
    contact_notes: Tuple[SectionItem, ...] = ()
    contact_index: Optional[int] = None    # sections preceding the contact section

    @property
    def is_empty(self) -> bool:
        return not (self.sections or self.contacts or self.contact_notes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sections": [
                {"title": s.title, "items": [item_to_dict(i) for i in s.items]}
                for s in self.sections
            ],
            "contacts": [c.to_dict() for c in self.contacts],
            "contact_title": self.contact_title,
            "contact_notes": [item_to_dict(i) for i in self.contact_notes],
            "contact_index": self.contact_index,
        }


def item_to_dict(item: SectionItem) -> Dict[str, Any]:
    if isinstance(item, ListItem):
        return {"type": "list_item", "marker": item.marker.value,
                "index": item.index, "text": item.text}
    if isinstance(item, LabelValue):
        return {"type": "label_value", "label": item.label, "value": item.value}
    return {"type": "paragraph", "text": item.text}


# ────────────────────────────────────────────────────────────────────
#  Builder
# ────────────────────────────────────────────────────────────────────
@dataclass
class _OpenSection:
    title: str
    items: List[SectionItem] = field(default_factory=list)

    def freeze(self) -> Section:
        return Section(self.title, tuple(self.items))


def build(blocks: Iterable[Block]) -> DocumentModel:
    """Assemble classified blocks into a DocumentModel."""
    sections: List[_OpenSection] = []
    current: Optional[_OpenSection] = None
    in_contacts = False
    contact_title: Optional[str] = None
    contact_index: Optional[int] = None
    contact_notes: List[SectionItem] = []
    aggregator = ContactAggregator()

    for block in blocks:
        if isinstance(block, Heading):
            aggregator.close_group()
            if block.opens_contacts:
                in_contacts = True
                current = None
                if contact_title is None:
                    contact_title = block.text
                    contact_index = len(sections)
                continue
            in_contacts = False
            current = _OpenSection(block.text)
            sections.append(current)
            continue

        if isinstance(block, ContactField):
            aggregator.feed(block)
            continue

        if in_contacts:
            contact_notes.append(block)
            continue

        if current is None:
            current = _OpenSection("")
            sections.append(current)
        current.items.append(block)

    model = DocumentModel(
        sections=tuple(s.freeze() for s in sections),
        contacts=tuple(aggregator.finish()),
        contact_title=contact_title,
        contact_notes=tuple(contact_notes),
        contact_index=contact_index,
    )
    logger.info(
        f"Built document model: {len(model.sections)} sections, "
        f"{len(model.contacts)} contacts"
    )
    return model


def parse_document(
    text: Optional[str],
    options: ClassifierOptions = DEFAULT_OPTIONS,
) -> DocumentModel:
    """Full parse: normalize → split → classify → build."""
    lines = split_lines(normalize(text))
    return build(classify(lines, options))
