import logging

from django.conf import settings
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .repository import ListingRepository

logger = logging.getLogger(__name__)


@receiver(pre_delete, sender=settings.AUTH_USER_MODEL)
def handle_user_deletion(sender, instance, **kwargs):
    """
    Remove a deleted user's listings and reviews through the repository,
    so no listing is left without an owner and no listing keeps ids of
    reviews that are gone.
    """
    repository = ListingRepository()
    reviews = repository.remove_reviews_by(instance)
    listings = repository.delete_owned_by(instance)
    if reviews or listings:
        logger.info(
            "User %s deleted: removed %d listing(s) and %d review(s)",
            instance.pk, listings, reviews
        )
