#!/usr/bin/env python3
"""
block_classify.py — Line-level Block Classification
====================================================

Splits normalized extraction text into lines and classifies every
non-blank line into exactly one Block:

  • Heading       `#`-prefixed line (level = number of `#`)
  • ContactField  name / org / role / email / phone inside the contact section
  • ListItem      `-` / `•` bullets and `1.` / `1)` / `1-` numbered items
  • LabelValue    bullet whose content is `label: value`
  • Paragraph     everything else

Classification is a single forward pass.  The only state is ParserState
(inside the contact section or not), threaded through as an explicit
value; a line's Block depends on its own text and that state, never on
lookahead.

Precedence per line (first match wins):
    heading > contact marker > contact field > bullet > numbered > paragraph

Usage:
    from block_classify import classify, classify_line, ParserState
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from utils.arabic_utils import extract_email, isolate_ltr_runs, strip_marks

logger = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────────
#  Config
# ────────────────────────────────────────────────────────────────────
CONTACT_SECTION_MARKER = "بيانات منسقي الاتصال"

HEADING_RE   = re.compile(r'^(#+)\s*(.*)$')
BULLET_RE    = re.compile(r'^[-•]\s*(.*)$')
# Leading integer then . ) or -, matched on the line with isolation marks removed
NUMBERED_RE  = re.compile(r'^([0-9]+)[.)\-]\s*(.*)$')
# Title of a bare contact-marker line: emphasis, colons and blanks trimmed
MARKER_TRIM  = " \t*:"

NAME_RE      = re.compile(r'^الاسم\s*:')
NAME_LOOSE_RE = re.compile(r'الاسم\s+:')
ORG_RE       = re.compile(r'^الجهة\s*:')
ORG_LOOSE_RE = re.compile(r'الجهة\s+:')
PHONE_LABEL_RE = re.compile(r'(?:رقم\s+)?الهاتف\s*:?')


# ────────────────────────────────────────────────────────────────────
#  Data Model
# ────────────────────────────────────────────────────────────────────
class ListMarker(str, Enum):
    BULLET   = "BULLET"
    NUMBERED = "NUMBERED"


class FieldKind(str, Enum):
    NAME  = "name"
    ORG   = "org"
    ROLE  = "role"
    EMAIL = "email"
    PHONE = "phone"


@dataclass(frozen=True)
class RawLine:
    """One input line with its original 0-based index."""
    index: int
    text: str


@dataclass(frozen=True)
class Heading:
    level: int                  # number of leading '#', 0 for a bare marker line
    text: str
    opens_contacts: bool = False
    line: int = 0


@dataclass(frozen=True)
class ListItem:
    marker: ListMarker
    text: str
    index: Optional[int] = None  # parsed number for NUMBERED items
    line: int = 0


@dataclass(frozen=True)
class LabelValue:
    label: str
    value: str
    line: int = 0


@dataclass(frozen=True)
class ContactField:
    kind: FieldKind
    value: str
    line: int = 0


@dataclass(frozen=True)
class Paragraph:
    text: str
    line: int = 0


Block = Union[Heading, ListItem, LabelValue, ContactField, Paragraph]


@dataclass(frozen=True)
class ParserState:
    """Fold state for the classification pass."""
    inside_contacts: bool = False


@dataclass(frozen=True)
class ClassifierOptions:
    contact_marker: str = CONTACT_SECTION_MARKER
    # Also treat contact-looking lines outside the section as ContactFields
    stray_contacts: bool = False


DEFAULT_OPTIONS = ClassifierOptions()


# ────────────────────────────────────────────────────────────────────
#  Helpers
# ────────────────────────────────────────────────────────────────────
def split_lines(text: str) -> List[RawLine]:
    """Split text into RawLines, keeping blank lines for index stability."""
    if not text:
        return []
    return [RawLine(i, line) for i, line in enumerate(text.split("\n"))]


def split_label_value(text: str) -> Optional[Tuple[str, str]]:
    """Split on the first ':' into (label, value); None unless both non-empty."""
    idx = text.find(":")
    if idx == -1:
        return None
    label = text[:idx].strip()
    value = text[idx + 1:].strip()
    if not label or not value:
        return None
    return label, value


def _after_first_colon(text: str) -> str:
    idx = text.find(":")
    return text[idx + 1:].strip() if idx != -1 else ""


def match_contact_field(text: str) -> Optional[Tuple[FieldKind, str]]:
    """Recognize a contact field inside the contact section.

    Order: name, org, role, email, phone.  A leading bullet marker is
    tolerated.
    """
    t = BULLET_RE.sub(r'\1', text).strip()

    if NAME_RE.match(t) or NAME_LOOSE_RE.search(t):
        return FieldKind.NAME, re.sub(r'^.*?الاسم\s*:', '', t).strip()

    if ORG_RE.match(t) or ORG_LOOSE_RE.search(t):
        return FieldKind.ORG, re.sub(r'^.*?الجهة\s*:', '', t).strip()

    if "الصفة" in t:
        return FieldKind.ROLE, _after_first_colon(t)

    if "@" in t or "البريد" in t:
        return FieldKind.EMAIL, extract_email(t) or ""

    if t.startswith("رقم الهاتف") or "الهاتف" in t:
        value = PHONE_LABEL_RE.sub('', t, count=1).strip()
        return FieldKind.PHONE, strip_marks(value).strip()

    return None


def looks_like_contact(text: str) -> bool:
    """Stricter standalone test for contact lines outside the section."""
    t = text.strip()
    return (
        t.startswith("الاسم:") or "الاسم :" in t
        or t.startswith("الجهة:") or "الجهة :" in t
        or t.startswith("الصفة")
        or t.startswith("رقم الهاتف") or "الهاتف:" in t
        or ("البريد" in t and "@" in t)
        or ("@" in t and "." in t)
    )


# ────────────────────────────────────────────────────────────────────
#  Classification
# ────────────────────────────────────────────────────────────────────
def classify_line(
    raw: RawLine,
    state: ParserState,
    options: ClassifierOptions = DEFAULT_OPTIONS,
) -> Tuple[Block, ParserState]:
    """Classify one non-blank line.  Returns (block, next_state)."""
    t = raw.text.strip()
    marker = options.contact_marker

    m = HEADING_RE.match(t)
    if m:
        title = m.group(2).strip()
        opens = bool(marker) and marker in title
        return (
            Heading(len(m.group(1)), title, opens_contacts=opens, line=raw.index),
            ParserState(inside_contacts=opens),
        )

    plain = strip_marks(t)

    if marker and marker in plain:
        return (
            Heading(0, plain.strip(MARKER_TRIM), opens_contacts=True, line=raw.index),
            ParserState(inside_contacts=True),
        )

    if state.inside_contacts or (options.stray_contacts and looks_like_contact(t)):
        field = match_contact_field(t)
        if field is not None:
            kind, value = field
            return ContactField(kind, value, line=raw.index), state

    m = BULLET_RE.match(t)
    if m:
        content = m.group(1).strip()
        pair = split_label_value(content)
        if pair:
            return LabelValue(pair[0], pair[1], line=raw.index), state
        return ListItem(ListMarker.BULLET, content, line=raw.index), state

    # The normalizer may have wrapped the list number into a longer run
    m = NUMBERED_RE.match(plain)
    if m:
        return (
            ListItem(ListMarker.NUMBERED, isolate_ltr_runs(m.group(2).strip()),
                     index=int(m.group(1)), line=raw.index),
            state,
        )

    return Paragraph(t, line=raw.index), state


def classify(
    lines: Iterable[Union[str, RawLine]],
    options: ClassifierOptions = DEFAULT_OPTIONS,
    state: ParserState = ParserState(),
) -> List[Block]:
    """Classify every non-blank line, in order.  Blank lines yield nothing."""
    blocks: List[Block] = []
    for i, line in enumerate(lines):
        raw = line if isinstance(line, RawLine) else RawLine(i, line)
        if not raw.text.strip():
            continue
        block, state = classify_line(raw, state, options)
        blocks.append(block)

    logger.debug(f"Classified {len(blocks)} blocks")
    return blocks
