# listings/services.py
"""
Listing mutation pipeline.

create:  normalize -> validate -> upload + geocode + bind image -> commit
update:  authorize -> normalize -> validate -> upload (if a file was sent) +
         geocode (if both location and country changed) + bind image -> commit
delete:  authorize -> commit (reviews cascade)

Validation and authorization failures are raised before anything is written
or uploaded.
Geocoding never fails a request; store failures always do.
"""

import logging
from collections.abc import Mapping

from .geocoding import DEFAULT_POINT, resolve_geometry
from .images import upload_image
from .models import Review
from .normalizer import normalize_listing_input, normalize_review_input
from .permissions import OwnershipGuard
from .repository import ListingRepository
from .validators import validate_listing, validate_review

logger = logging.getLogger(__name__)

repository = ListingRepository()
guard = OwnershipGuard(repository)


def list_listings(category=None, search=None):
    return repository.search(category=category, query=search)


def get_listing(listing_id):
    """The listing plus its reviews in stored order."""
    listing = repository.get(listing_id)
    return listing, repository.reviews_for(listing)


def _store_image(upload, image_file):
    """Upload ``image_file`` once the submission is known to be good."""
    if image_file is not None:
        return upload_image(image_file)
    return upload


def create_listing(principal, raw, upload=None, image_file=None):
    guard.require_principal(principal)
    canonical = normalize_listing_input(raw)
    if canonical is None:
        keys = sorted(raw) if isinstance(raw, Mapping) else type(raw).__name__
        logger.warning("create_listing: no listing fields in submission (keys=%s)", keys)

    fields = validate_listing(canonical)
    upload = _store_image(upload, image_file)
    geometry = resolve_geometry(fields['location'], fields['country'])
    return repository.create(principal, fields, geometry, image=upload)


def update_listing(listing_id, principal, raw, upload=None, image_file=None):
    listing = guard.authorize_listing(listing_id, principal)

    fields = validate_listing(
        normalize_listing_input(raw),
        partial=True,
        fallback_category=listing.category
    )
    upload = _store_image(upload, image_file)

    geometry = None
    if fields.get('location') and fields.get('country'):
        # Keep the current point if the new address can't be resolved
        geometry = resolve_geometry(
            fields['location'],
            fields['country'],
            fallback=listing.geometry or DEFAULT_POINT
        )

    return repository.update(listing.pk, fields, geometry=geometry, image=upload)


def delete_listing(listing_id, principal):
    listing = guard.authorize_listing(listing_id, principal)
    repository.delete(listing.pk)
    return listing


def post_review(listing_id, principal, raw):
    guard.require_principal(principal)
    fields = validate_review(normalize_review_input(raw))
    # Fails with NotFoundError before the review is written
    repository.get(listing_id)
    review = Review(author=principal, **fields)
    return repository.add_review(listing_id, review)


def destroy_review(listing_id, review_id, principal):
    review = guard.authorize_review(listing_id, review_id, principal)
    repository.remove_review(listing_id, review.pk)
    return review
