# listings/repository.py
import logging
import re
import uuid
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import Q

from .exceptions import NotFoundError, PersistenceError
from .images import bind_image
from .models import Listing, Review
from .normalizer import LISTING_FIELDS

logger = logging.getLogger(__name__)

PRICE_RANGE = re.compile(r'^(\d+)-(\d+)$')
PERSISTENCE_MESSAGE = "Something went wrong while saving. Please try again."


@contextmanager
def _unit_of_work(action, **context):
    """One atomic store round-trip; database failures become PersistenceError."""
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        logger.exception("Store write failed during %s %s", action, context)
        raise PersistenceError(PERSISTENCE_MESSAGE) from exc


def _uuid_list(ids):
    valid = []
    for value in ids:
        try:
            valid.append(uuid.UUID(str(value)))
        except ValueError:
            logger.warning("Skipping malformed review id %r", value)
    return valid


def _as_price(term):
    try:
        price = Decimal(term)
    except InvalidOperation:
        return None
    return price if price.is_finite() else None


class ListingRepository:
    """Persistence for listings and the reviews they own."""

    def get(self, listing_id):
        try:
            return Listing.objects.select_related('owner').get(pk=listing_id)
        except (Listing.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Listing does not exist!")

    def get_review(self, review_id):
        try:
            return Review.objects.select_related('author').get(pk=review_id)
        except (Review.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Review not found!")

    def reviews_for(self, listing):
        """The listing's reviews in the order the listing stores them."""
        ids = listing.review_ids()
        found = Review.objects.select_related('author').filter(pk__in=_uuid_list(ids))
        by_id = {str(review.pk): review for review in found}
        return [by_id[review_id] for review_id in ids if review_id in by_id]

    def search(self, category=None, query=None):
        queryset = Listing.objects.select_related('owner')

        if category and category.strip():
            queryset = queryset.filter(category=category.strip())

        if query and query.strip():
            term = query.strip()
            price_range = PRICE_RANGE.match(term)
            if price_range:
                queryset = queryset.filter(
                    price__gte=Decimal(price_range.group(1)),
                    price__lte=Decimal(price_range.group(2))
                )
            else:
                price = _as_price(term)
                if price is not None:
                    queryset = queryset.filter(price=price)
                else:
                    queryset = queryset.filter(
                        Q(title__icontains=term)
                        | Q(category__icontains=term)
                        | Q(location__icontains=term)
                        | Q(country__icontains=term)
                    )

        return list(queryset)

    def create(self, owner, fields, geometry, image=None):
        listing = Listing(owner=owner)
        for attr in LISTING_FIELDS:
            if attr in fields:
                setattr(listing, attr, fields[attr])
        listing.geometry = geometry
        bind_image(listing, image)

        with _unit_of_work('create', owner=owner.pk):
            listing.save()

        logger.info("Listing %s created by %s", listing.pk, owner.pk)
        return listing

    def update(self, listing_id, fields, geometry=None, image=None):
        """
        Apply a partial change set. ``geometry`` and ``image`` are only
        written when given; the owner is never touched here.
        """
        with _unit_of_work('update', listing_id=str(listing_id)):
            listing = self.get(listing_id)
            for attr in LISTING_FIELDS:
                if attr in fields:
                    setattr(listing, attr, fields[attr])
            if geometry is not None:
                listing.geometry = geometry
            bind_image(listing, image)
            listing.save()

        logger.info("Listing %s updated (fields=%s)", listing.pk, sorted(fields))
        return listing

    def delete(self, listing_id):
        """Delete a listing together with every review it references."""
        with _unit_of_work('delete', listing_id=str(listing_id)):
            listing = self.get(listing_id)
            review_ids = _uuid_list(listing.review_ids())
            deleted_reviews, _ = Review.objects.filter(pk__in=review_ids).delete()
            listing.delete()

        logger.info("Listing %s deleted with %d review(s)", listing_id, deleted_reviews)

    def add_review(self, listing_id, review):
        with _unit_of_work('add_review', listing_id=str(listing_id)):
            listing = self.get(listing_id)
            review.save()
            listing.add_review_id(review.pk)
            listing.save(update_fields=['reviews', 'updated_at'])
        return review

    def remove_review(self, listing_id, review_id):
        with _unit_of_work('remove_review', listing_id=str(listing_id), review_id=str(review_id)):
            listing = self.get(listing_id)
            listing.remove_review_id(review_id)
            listing.save(update_fields=['reviews', 'updated_at'])
            Review.objects.filter(pk__in=_uuid_list([review_id])).delete()

    # --- account removal ---

    def delete_owned_by(self, owner):
        """Delete every listing ``owner`` holds, reviews included."""
        count = 0
        for listing_id in Listing.objects.filter(owner=owner).values_list('pk', flat=True):
            self.delete(listing_id)
            count += 1
        return count

    def remove_reviews_by(self, author):
        """Pull each review ``author`` wrote off its listing, then delete it."""
        review_ids = {str(pk) for pk in Review.objects.filter(author=author).values_list('pk', flat=True)}
        if not review_ids:
            return 0

        with _unit_of_work('remove_reviews_by', author=author.pk):
            for listing in Listing.objects.only('id', 'reviews', 'updated_at').iterator():
                kept = [rid for rid in listing.review_ids() if rid not in review_ids]
                if len(kept) != len(listing.review_ids()):
                    listing.reviews = kept
                    listing.save(update_fields=['reviews', 'updated_at'])
            Review.objects.filter(author=author).delete()

        logger.info("Removed %d review(s) by user %s", len(review_ids), author.pk)
        return len(review_ids)

    # --- ownership repair ---

    def claim_orphan(self, listing_id, owner):
        """Bind ``owner`` only if the listing still has none. True if it did."""
        with _unit_of_work('claim_orphan', listing_id=str(listing_id)):
            claimed = Listing.objects.filter(pk=listing_id, owner__isnull=True).update(owner=owner)
        return claimed == 1

    def orphans(self):
        return list(Listing.objects.filter(owner__isnull=True).order_by('created_at'))

    def assign_owner(self, owner):
        with _unit_of_work('assign_owner', owner=owner.pk):
            return Listing.objects.filter(owner__isnull=True).update(owner=owner)

    def delete_orphans(self):
        count = 0
        for listing in self.orphans():
            self.delete(listing.pk)
            count += 1
        return count
