import uuid
from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase

from listings.exceptions import NotFoundError, PersistenceError
from listings.images import UploadedImage
from listings.models import Listing, Review
from listings.repository import ListingRepository

from .factories import ASPEN, attach_review, make_listing, make_user


class CascadeDeleteTests(TestCase):

    def setUp(self):
        self.repository = ListingRepository()
        self.owner = make_user("owner")
        self.guest = make_user("guest")

    def test_delete_removes_every_referenced_review(self):
        for count in (0, 1, 3):
            with self.subTest(reviews=count):
                listing = make_listing(self.owner)
                review_ids = [attach_review(listing, self.guest).pk for _ in range(count)]

                self.repository.delete(listing.pk)

                self.assertFalse(Listing.objects.filter(pk=listing.pk).exists())
                self.assertFalse(Review.objects.filter(pk__in=review_ids).exists())

    def test_delete_leaves_other_listings_reviews_alone(self):
        doomed = make_listing(self.owner, title="Doomed")
        kept = make_listing(self.owner, title="Kept")
        attach_review(doomed, self.guest)
        survivor = attach_review(kept, self.guest)

        self.repository.delete(doomed.pk)

        self.assertTrue(Review.objects.filter(pk=survivor.pk).exists())

    def test_failed_review_cleanup_keeps_the_listing(self):
        listing = make_listing(self.owner)
        review = attach_review(listing, self.guest)

        with patch("django.db.models.query.QuerySet.delete", side_effect=DatabaseError("disk full")):
            with self.assertRaises(PersistenceError):
                self.repository.delete(listing.pk)

        self.assertTrue(Listing.objects.filter(pk=listing.pk).exists())
        self.assertTrue(Review.objects.filter(pk=review.pk).exists())

    def test_delete_unknown_listing(self):
        with self.assertRaises(NotFoundError):
            self.repository.delete(uuid.uuid4())


class ListingWriteTests(TestCase):

    def setUp(self):
        self.repository = ListingRepository()
        self.owner = make_user("owner")

    def test_create_binds_owner_geometry_and_image(self):
        listing = self.repository.create(
            self.owner,
            {"title": "Cabin", "description": "Cozy", "location": "Aspen",
             "country": "USA", "category": "mountain", "price": Decimal("100")},
            {"type": "Point", "coordinates": list(ASPEN)},
            image=UploadedImage("https://img/cabin.jpg", "StayBnb/cabin"),
        )
        stored = Listing.objects.get(pk=listing.pk)
        self.assertEqual(stored.owner, self.owner)
        self.assertEqual(stored.latlng, [ASPEN[1], ASPEN[0]])
        self.assertEqual(stored.image["filename"], "StayBnb/cabin")
        self.assertEqual(stored.reviews, [])

    def test_update_only_touches_given_fields(self):
        listing = make_listing(self.owner, image={"url": "https://img/old.jpg", "filename": "old"})

        self.repository.update(listing.pk, {"title": "Renamed", "owner": None})

        stored = Listing.objects.get(pk=listing.pk)
        self.assertEqual(stored.title, "Renamed")
        self.assertEqual(stored.owner, self.owner)
        self.assertEqual(stored.geometry["coordinates"], list(ASPEN))
        self.assertEqual(stored.image["url"], "https://img/old.jpg")

    def test_update_unknown_listing(self):
        with self.assertRaises(NotFoundError):
            self.repository.update(uuid.uuid4(), {"title": "Ghost"})

    def test_store_failure_becomes_persistence_error(self):
        listing = make_listing(self.owner)
        with patch.object(Listing, "save", side_effect=DatabaseError("connection lost")):
            with self.assertLogs("listings.repository", level="ERROR"):
                with self.assertRaises(PersistenceError):
                    self.repository.update(listing.pk, {"title": "Renamed"})
        self.assertEqual(Listing.objects.get(pk=listing.pk).title, "Cabin")


class ReviewRelationshipTests(TestCase):

    def setUp(self):
        self.repository = ListingRepository()
        self.owner = make_user("owner")
        self.guest = make_user("guest")
        self.listing = make_listing(self.owner)

    def test_add_review_appends_in_order(self):
        first = self.repository.add_review(self.listing.pk, Review(author=self.guest, rating=4, comment="Good"))
        second = self.repository.add_review(self.listing.pk, Review(author=self.guest, rating=5, comment="Better"))

        stored = Listing.objects.get(pk=self.listing.pk)
        self.assertEqual(stored.reviews, [str(first.pk), str(second.pk)])
        self.assertEqual(
            [r.comment for r in self.repository.reviews_for(stored)],
            ["Good", "Better"]
        )

    def test_add_review_to_missing_listing_writes_nothing(self):
        with self.assertRaises(NotFoundError):
            self.repository.add_review(uuid.uuid4(), Review(author=self.guest, rating=4, comment="Good"))
        self.assertEqual(Review.objects.count(), 0)

    def test_remove_review_pulls_id_and_deletes_document(self):
        keep = attach_review(self.listing, self.guest, comment="Keep")
        drop = attach_review(self.listing, self.guest, comment="Drop")

        self.repository.remove_review(self.listing.pk, drop.pk)

        stored = Listing.objects.get(pk=self.listing.pk)
        self.assertEqual(stored.reviews, [str(keep.pk)])
        self.assertEqual(stored.title, "Cabin")
        self.assertFalse(Review.objects.filter(pk=drop.pk).exists())


class SearchTests(TestCase):

    def setUp(self):
        self.repository = ListingRepository()
        owner = make_user("owner")
        make_listing(owner, title="Beach hut", category="beach", price=80, location="Malibu")
        make_listing(owner, title="Cabin", category="mountain", price=150, location="Aspen")
        make_listing(owner, title="Igloo", category="arctic", price=300, location="Tromso", country="Norway")

    def titles(self, **filters):
        return sorted(listing.title for listing in self.repository.search(**filters))

    def test_no_filters(self):
        self.assertEqual(self.titles(), ["Beach hut", "Cabin", "Igloo"])

    def test_category(self):
        self.assertEqual(self.titles(category="mountain"), ["Cabin"])

    def test_price_range(self):
        self.assertEqual(self.titles(query="100-300"), ["Cabin", "Igloo"])

    def test_exact_price(self):
        self.assertEqual(self.titles(query="80"), ["Beach hut"])

    def test_text_search_is_case_insensitive(self):
        self.assertEqual(self.titles(query="norway"), ["Igloo"])
        self.assertEqual(self.titles(query="ASPEN"), ["Cabin"])
