#!/usr/bin/env python3
"""
contact_aggregate.py — Group contact fields into contact records.

A `name` field opens a new record; every other field kind sets (and
overwrites) the matching attribute of the record in progress.  Records are
finalized at the next name, at the end of the contact section, and at the
end of input.  Output order equals input order and a record never mixes
fields from two name-delimited groups.

Usage:
    from contact_aggregate import aggregate, ContactAggregator, Contact
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Dict, Iterable, List, Optional

from block_classify import ContactField, FieldKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contact:
    """A finalized contact record.  Missing fields stay None."""
    name: Optional[str] = None
    org: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    def get(self, kind: FieldKind) -> Optional[str]:
        return getattr(self, kind.value)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class ContactAggregator:
    """Owns the in-progress contact while a field run is scanned."""

    def __init__(self):
        self._current: Dict[str, str] = {}
        self.contacts: List[Contact] = []

    def feed(self, field: ContactField) -> None:
        if field.kind is FieldKind.NAME:
            self.close_group()
            self._current = {"name": field.value} if field.value else {}
            return
        if not field.value:
            # Label without a value (e.g. "الصفة" alone) never clears data
            return
        self._current[field.kind.value] = field.value

    def close_group(self) -> None:
        """Finalize the record in progress, if it holds any field."""
        if self._current:
            self.contacts.append(Contact(**self._current))
            self._current = {}

    def finish(self) -> List[Contact]:
        self.close_group()
        logger.debug(f"Aggregated {len(self.contacts)} contacts")
        return list(self.contacts)


def aggregate(field_run: Iterable[ContactField]) -> List[Contact]:
    """Aggregate an ordered run of contact fields into contacts."""
    aggregator = ContactAggregator()
    for field in field_run:
        aggregator.feed(field)
    return aggregator.finish()
