# listings/validators.py
import logging
from decimal import Decimal, InvalidOperation

from rest_framework import serializers

from .exceptions import ValidationError
from .models import CATEGORY_CHOICES
from .normalizer import LISTING_FIELDS, REVIEW_FIELDS, ListingInput, ReviewInput

logger = logging.getLogger(__name__)

CATEGORY_REQUIRED = "Category is required. Please select a category."
MAX_PRICE = Decimal('9999999999.99')

# Values browsers and JS clients send for "nothing selected"
EMPTY_MARKERS = ('', 'null', 'undefined')


class ListingInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField()
    price = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    location = serializers.CharField(max_length=255)
    country = serializers.CharField(max_length=100)
    category = serializers.ChoiceField(
        choices=CATEGORY_CHOICES,
        error_messages={
            'required': CATEGORY_REQUIRED,
            'null': CATEGORY_REQUIRED,
            'invalid_choice': '"{input}" is not a valid category.',
        }
    )

    def validate_price(self, value):
        """Convert the submitted string to Decimal, rejecting negatives."""
        if value is None or value in EMPTY_MARKERS:
            return None
        try:
            price = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise serializers.ValidationError("price must be a valid number")
        if not price.is_finite():
            raise serializers.ValidationError("price must be a valid number")
        if price < 0:
            raise serializers.ValidationError("price must not be negative")
        if price > MAX_PRICE:
            raise serializers.ValidationError("price is too large")
        return price.quantize(Decimal('0.01'))


class ReviewInputSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField()


def _as_values(data, canonical_type):
    if data is None:
        return {}
    if isinstance(data, canonical_type):
        return data.as_dict()
    return dict(data)


def _join_errors(errors, order):
    parts = []
    for field in sorted(errors, key=lambda f: order.index(f) if f in order else len(order)):
        messages = errors[field]
        if not isinstance(messages, (list, tuple)):
            messages = [messages]
        parts.append(f"{field}: {' '.join(str(m) for m in messages)}")
    return "; ".join(parts)


def validate_listing(data, *, partial=False, fallback_category=None):
    """
    Check a canonical listing submission and return the cleaned fields.

    ``partial`` is the update path: omitted fields are left alone and an absent
    submission is an empty change set. ``fallback_category`` is the record's
    stored category, used when the edit form did not send one.
    """
    values = _as_values(data, ListingInput)

    if values.get('category') in (None, ''):
        values.pop('category', None)
        if fallback_category:
            values['category'] = fallback_category
            logger.info("Category missing from submission, keeping stored %r", fallback_category)

    if not values and not partial:
        raise ValidationError(
            "No listing data submitted. " + CATEGORY_REQUIRED,
            fields={'category': [CATEGORY_REQUIRED]}
        )

    serializer = ListingInputSerializer(data=values, partial=partial)
    errors = {} if serializer.is_valid() else dict(serializer.errors)

    # Partial validation skips absent fields, but category is never optional
    if 'category' not in values and 'category' not in errors:
        errors['category'] = [CATEGORY_REQUIRED]

    if errors:
        message = _join_errors(errors, LISTING_FIELDS)
        logger.info("Listing submission rejected: %s", message)
        raise ValidationError(message, fields=errors)

    return dict(serializer.validated_data)


def validate_review(data):
    values = _as_values(data, ReviewInput)
    serializer = ReviewInputSerializer(data=values)
    if not serializer.is_valid():
        errors = dict(serializer.errors)
        raise ValidationError(_join_errors(errors, REVIEW_FIELDS), fields=errors)
    return dict(serializer.validated_data)
