"""
Arabic utility functions for bidi normalization of extracted text.

The extraction webhook returns logical-order Arabic with embedded Latin
tokens (phone numbers, dates, emails).  These helpers clean invisible
characters and isolate numeric runs so they keep left-to-right order inside
right-to-left paragraphs.
"""

import re
from typing import Optional

import arabic_reshaper
from bidi import get_display

# Arabic Unicode ranges
ARABIC_RANGE = range(0x0600, 0x06FF + 1)
ARABIC_PRESENTATION_FORMS_A = range(0xFB50, 0xFDFF + 1)
ARABIC_PRESENTATION_FORMS_B = range(0xFE70, 0xFEFF + 1)

# Directional isolation marks wrapped around LTR runs
LRI = '\u2066'  # Left-to-right isolate
PDI = '\u2069'  # Pop directional isolate

# Invisible characters removed before classification
INVISIBLE_CHARS = [
    '\u200B',  # Zero-width space
    '\u200C',  # Zero-width non-joiner
    '\u200D',  # Zero-width joiner
    '\uFEFF',  # BOM / zero-width no-break space
    LRI,
    PDI,
]

_STRIP_INVISIBLE = {ord(c): None for c in INVISIBLE_CHARS}
_STRIP_MARKS = {ord(c): None for c in (LRI, PDI, '\u200E', '\u200F')}

# Phone-like runs: 6+ chars of digits, blanks, '-', parentheses.
# Must start with a digit or '(' and end with a digit or ')'.
# Separators are blanks, never newlines: a run stays on its own line.
PHONE_PATTERN = r'\+?[0-9(][0-9 \t\-()]{4,}[0-9)]'

# Numeric groups: 12, 2024/01/05, 3-4, 1.5, 050 123
NUMERIC_GROUP_PATTERN = r'[0-9]+(?:[/\-. \t][0-9]+)*'

# Phone first: alternation order makes it win where both could match
LTR_RUN_RE = re.compile(f'(?:{PHONE_PATTERN})|(?:{NUMERIC_GROUP_PATTERN})')

EMAIL_RE = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')

BIDI_MODES = ("full", "mirror")


def clean_invisible(text: str) -> str:
    """Remove zero-width characters and BOM, turn NBSP into a space."""
    if not text:
        return ""
    return text.translate(_STRIP_INVISIBLE).replace('\u00A0', ' ')


def isolate_ltr_runs(text: str) -> str:
    """Wrap phone and numeric runs in LRI ... PDI.

    One regex pass, so matches never overlap and no run is wrapped twice.
    """
    if not text:
        return ""
    return LTR_RUN_RE.sub(lambda m: f"{LRI}{m.group(0)}{PDI}", text)


def mirror_words(text: str) -> str:
    """Reverse word order within each line (renderer compatibility shim)."""
    if not text:
        return ""
    return "\n".join(
        " ".join(reversed(line.split(" ")))
        for line in text.split("\n")
    )


def normalize(text: Optional[str], reading_order: bool = False) -> str:
    """
    Canonical bidi normalization of extracted text.

    Args:
        text: Raw extracted text (None is treated as empty)
        reading_order: Also mirror word order per line, for renderers
            without native bidi support

    Returns:
        Cleaned text with numeric/phone runs isolated as LTR
    """
    if not text:
        return ""

    normalized = isolate_ltr_runs(clean_invisible(text))

    if reading_order:
        normalized = mirror_words(normalized)

    return normalized


def strip_marks(text: Optional[str]) -> str:
    """Drop directional marks (for Latin-only data and glyph drawing)."""
    if not text:
        return ""
    return text.translate(_STRIP_MARKS)


def extract_email(text: Optional[str]) -> Optional[str]:
    """Return the first email address in text, ignoring directional marks."""
    if not text:
        return None
    match = EMAIL_RE.search(strip_marks(text))
    return match.group(0) if match else None


def is_arabic_text(text: str, threshold: float = 0.3) -> bool:
    """
    Check if text is predominantly Arabic.

    Args:
        text: Input text
        threshold: Minimum ratio of Arabic characters (0.0-1.0)

    Returns:
        True if text contains >= threshold ratio of Arabic characters
    """
    if not text:
        return False

    non_space_chars = [c for c in text if not c.isspace()]
    if not non_space_chars:
        return False

    arabic_count = sum(
        1 for c in non_space_chars
        if ord(c) in ARABIC_RANGE or
           ord(c) in ARABIC_PRESENTATION_FORMS_A or
           ord(c) in ARABIC_PRESENTATION_FORMS_B
    )

    ratio = arabic_count / len(non_space_chars)
    return ratio >= threshold


def visual_order(text: str, mode: str = "full") -> str:
    """
    Convert logical-order text to shaped, visual-order glyph text for
    drawing surfaces that place glyphs strictly left to right.

    Modes:
        full   - Arabic shaping + Unicode bidi reordering
        mirror - legacy word mirror; each word is shaped and reordered
                 on its own
    """
    if not text:
        return ""
    if mode not in BIDI_MODES:
        raise ValueError(f"unknown bidi mode: {mode!r}")

    if mode == "mirror":
        words = normalize(strip_marks(text), reading_order=True).split(" ")
        return " ".join(
            strip_marks(get_display(arabic_reshaper.reshape(w))) for w in words
        )

    return strip_marks(get_display(arabic_reshaper.reshape(text)))


def shape(text: Optional[str]) -> str:
    """Contextual Arabic glyph forms in logical order, marks removed."""
    if not text:
        return ""
    return arabic_reshaper.reshape(strip_marks(text))
