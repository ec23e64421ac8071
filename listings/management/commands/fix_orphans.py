from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from listings.repository import ListingRepository


class Command(BaseCommand):
    help = (
        "Report listings that have no owner. Use --assign <user id> to give them "
        "an owner or --delete to remove them along with their reviews."
    )

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            "--assign",
            metavar="USER_ID",
            help="Assign this user as owner of every orphaned listing.",
        )
        group.add_argument(
            "--delete",
            action="store_true",
            help="Delete every orphaned listing and its reviews.",
        )

    def handle(self, *args, **options):
        repository = ListingRepository()
        orphans = repository.orphans()

        if not orphans:
            self.stdout.write(self.style.SUCCESS("No orphaned listings found."))
            return

        self.stdout.write(f"Found {len(orphans)} orphaned listing(s):")
        for listing in orphans:
            self.stdout.write(
                f"- {listing.pk} | {listing.title or '(no title)'} | {listing.location or '(no location)'}"
            )

        if options["assign"]:
            User = get_user_model()
            try:
                user = User.objects.get(pk=options["assign"])
            except (User.DoesNotExist, ValueError):
                raise CommandError(f"User with id {options['assign']} not found. Aborting assignment.")

            count = repository.assign_owner(user)
            self.stdout.write(self.style.SUCCESS(f"Assigned owner {user.pk} to {count} listing(s)."))
            return

        if options["delete"]:
            count = repository.delete_orphans()
            self.stdout.write(self.style.SUCCESS(f"Deleted {count} orphaned listing(s)."))
            return

        self.stdout.write(self.style.WARNING(
            "No action taken. To assign a user: --assign <USER_ID>. To delete: --delete."
        ))
