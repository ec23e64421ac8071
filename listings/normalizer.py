# listings/normalizer.py
"""
Reconcile the different shapes a form submission can take into one record.

Multipart forms, urlencoded forms and JSON clients disagree on how nested
fields are sent. The same listing can arrive as::

    {"Listing": {"title": "Cabin", ...}}     # nested object (JSON)
    {"Listing[title]": "Cabin", ...}         # bracket keys (HTML forms)
    {"Listing.title": "Cabin", ...}          # dot keys (some form libraries)
    {"title": "Cabin", ...}                  # bare top-level keys

The structured shapes (nested, bracket, dot) are tried in that order and the
first one that carries a field wins it. Bare keys fill in whatever fields no
structured shape sent, so a form mixing both keeps every field. A bare
``category`` also replaces a blank structured one.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields

LISTING_PREFIX = 'Listing'
LISTING_FIELDS = ('title', 'description', 'price', 'location', 'country', 'category')
LISTING_FALLBACK_FIELDS = ('category',)

REVIEW_PREFIX = 'review'
REVIEW_FIELDS = ('rating', 'comment')


@dataclass(frozen=True)
class _CanonicalInput:

    @classmethod
    def from_fields(cls, values):
        return cls(**{f.name: values.get(f.name) for f in fields(cls)})

    def as_dict(self):
        """Only the fields that were actually submitted."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class ListingInput(_CanonicalInput):
    title: object = None
    description: object = None
    price: object = None
    location: object = None
    country: object = None
    category: object = None


@dataclass(frozen=True)
class ReviewInput(_CanonicalInput):
    rating: object = None
    comment: object = None


def _nested_rule(raw, prefix, known):
    nested = raw.get(prefix)
    if not isinstance(nested, Mapping):
        return {}
    return {key: nested[key] for key in known if key in nested}


def _pattern_rule(pattern):
    def rule(raw, prefix, known):
        regex = re.compile(pattern % re.escape(prefix))
        found = {}
        for key in raw.keys():
            match = regex.match(str(key))
            if match and match.group(1) in known:
                found.setdefault(match.group(1), raw.get(key))
        return found
    return rule


def _bare_rule(raw, prefix, known):
    return {key: raw.get(key) for key in known if key in raw}


# Structured shapes in precedence order
STRUCTURED_RULES = (
    ('nested', _nested_rule),
    ('bracket', _pattern_rule(r'^%s\[(.+)\]$')),
    ('dot', _pattern_rule(r'^%s\.(.+)$')),
)


def extract_fields(raw, prefix, known, fallback_fields=()):
    """Apply the extraction rules and return a plain dict of found fields."""
    # JSON bodies can be lists or scalars; only mappings carry fields
    if not isinstance(raw, Mapping) or not raw:
        return {}

    found = {}
    for _name, rule in STRUCTURED_RULES:
        for key, value in rule(raw, prefix, known).items():
            found.setdefault(key, value)

    for key, value in _bare_rule(raw, prefix, known).items():
        if key not in found:
            found[key] = value
        elif key in fallback_fields and found[key] in (None, '') and value not in (None, ''):
            found[key] = value
    return found


def normalize_listing_input(raw):
    """Return a ``ListingInput`` or ``None`` when no listing field was sent."""
    found = extract_fields(raw, LISTING_PREFIX, LISTING_FIELDS, LISTING_FALLBACK_FIELDS)
    if not found:
        return None
    return ListingInput.from_fields(found)


def normalize_review_input(raw):
    found = extract_fields(raw, REVIEW_PREFIX, REVIEW_FIELDS)
    if not found:
        return None
    return ReviewInput.from_fields(found)
