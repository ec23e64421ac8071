# listings/permissions.py
"""
Owner / author checks for listing-scoped mutations.

Each check walks the same steps: require an authenticated principal, load
the resource, resolve who owns it, compare ids. The listing check has one
extra step between loading and resolving: a listing with no owner at all is
claimed by the current principal (logged, at most once per listing) before
the comparison runs.
"""

import enum
import logging

from .exceptions import ForbiddenError, NotFoundError
from .repository import ListingRepository

logger = logging.getLogger(__name__)


class Decision(enum.Enum):
    ALLOW = 'allow'
    DENY = 'deny'


def _same_identity(owner_id, principal):
    return owner_id is not None and str(owner_id) == str(principal.pk)


class OwnershipGuard:

    def __init__(self, repository=None):
        self.repository = repository or ListingRepository()

    def require_principal(self, principal):
        if principal is None or not getattr(principal, 'is_authenticated', False):
            raise ForbiddenError("You must be logged in first!")

    def _repair_orphan(self, listing, principal):
        # TODO: decide whether orphans should wait for `manage.py fix_orphans`
        # instead of being claimed by whoever edits them first.
        if self.repository.claim_orphan(listing.pk, principal):
            logger.warning(
                "Listing %s had no owner set. Assigned user %s as owner.",
                listing.pk, principal.pk
            )
        return self.repository.get(listing.pk)

    def decide(self, owner_id, principal):
        return Decision.ALLOW if _same_identity(owner_id, principal) else Decision.DENY

    def authorize_listing(self, listing_id, principal):
        """Return the listing if ``principal`` owns it, else raise."""
        self.require_principal(principal)
        listing = self.repository.get(listing_id)

        if listing.owner_id is None:
            listing = self._repair_orphan(listing, principal)

        if self.decide(listing.owner_id, principal) is Decision.DENY:
            logger.info("User %s denied on listing %s", principal.pk, listing.pk)
            raise ForbiddenError("You don't have permission!")
        return listing

    def authorize_review(self, listing_id, review_id, principal):
        """Return the review if ``principal`` wrote it, else raise."""
        self.require_principal(principal)
        listing = self.repository.get(listing_id)
        review = self.repository.get_review(review_id)

        if str(review.pk) not in listing.review_ids():
            raise NotFoundError("Review not found!")

        if self.decide(review.author_id, principal) is Decision.DENY:
            logger.info("User %s denied on review %s", principal.pk, review.pk)
            raise ForbiddenError("You are not the author of this review!")
        return review
