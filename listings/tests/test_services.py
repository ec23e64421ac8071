import uuid
from unittest.mock import patch

import requests
from django.forms.models import model_to_dict
from django.test import TestCase, override_settings

from listings import services
from listings.exceptions import ForbiddenError, NotFoundError, ValidationError
from listings.images import UploadedImage
from listings.models import Listing, Review

from .factories import attach_review, make_listing, make_user, mapbox_response

CABIN = {
    "title": "Cabin",
    "description": "Cozy",
    "price": 100,
    "location": "Aspen",
    "country": "USA",
    "category": "mountain",
}
DENVER = (-104.9903, 39.7392)


@override_settings(MAPBOX_TOKEN="test-token")
@patch("listings.geocoding.requests.get")
class CreateListingTests(TestCase):

    def setUp(self):
        self.alice = make_user("alice")

    def test_cabin_with_image(self, mock_get):
        mock_get.return_value = mapbox_response(-106.8175, 39.1911)
        upload = UploadedImage("https://res.cloudinary.com/demo/cabin.jpg", "StayBnb/cabin")

        listing = services.create_listing(self.alice, {"Listing": CABIN}, upload=upload)

        stored = Listing.objects.get(pk=listing.pk)
        self.assertEqual(stored.category, "mountain")
        self.assertNotEqual(stored.geometry["coordinates"], [0, 0])
        self.assertEqual(stored.image["url"], upload.url)
        self.assertEqual(stored.owner, self.alice)

    def test_missing_category_fails_before_geocoding(self, mock_get):
        payload = {key: value for key, value in CABIN.items() if key != "category"}

        with self.assertRaises(ValidationError) as ctx:
            services.create_listing(self.alice, payload)

        self.assertIn("category", ctx.exception.message.lower())
        self.assertEqual(Listing.objects.count(), 0)
        mock_get.assert_not_called()

    def test_mixed_bracket_and_bare_keys(self, mock_get):
        mock_get.return_value = mapbox_response(-106.8175, 39.1911)

        listing = services.create_listing(self.alice, {
            "Listing[title]": "Cabin",
            "Listing[category]": "mountain",
            "description": "Cozy",
            "location": "Aspen",
            "country": "USA",
        })

        self.assertEqual(listing.title, "Cabin")
        self.assertEqual(listing.description, "Cozy")
        self.assertEqual(listing.location, "Aspen")

    @patch("listings.services.upload_image")
    def test_invalid_submission_is_never_uploaded(self, mock_upload, mock_get):
        with self.assertRaises(ValidationError):
            services.create_listing(self.alice, {"title": "Cabin"}, image_file=object())
        mock_upload.assert_not_called()

    def test_empty_submission(self, mock_get):
        with self.assertRaises(ValidationError):
            services.create_listing(self.alice, {"csrfmiddlewaretoken": "x"})

    def test_geocoder_outage_does_not_block_creation(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")

        listing = services.create_listing(self.alice, CABIN)

        self.assertEqual(listing.geometry, {"type": "Point", "coordinates": [0, 0]})
        self.assertIsNone(listing.image)


@override_settings(MAPBOX_TOKEN="test-token")
@patch("listings.geocoding.requests.get")
class UpdateListingTests(TestCase):

    def setUp(self):
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.listing = make_listing(
            self.alice,
            image={"url": "https://img/old.jpg", "filename": "StayBnb/old"},
        )

    def test_partial_edit_keeps_geometry_image_and_category(self, mock_get):
        before = Listing.objects.get(pk=self.listing.pk)

        updated = services.update_listing(self.listing.pk, self.alice, {"Listing[title]": "Log cabin"})

        self.assertEqual(updated.title, "Log cabin")
        self.assertEqual(updated.geometry, before.geometry)
        self.assertEqual(updated.image, before.image)
        self.assertEqual(updated.category, "mountain")
        mock_get.assert_not_called()

    def test_location_without_country_does_not_geocode(self, mock_get):
        updated = services.update_listing(self.listing.pk, self.alice, {"location": "Denver"})
        self.assertEqual(updated.location, "Denver")
        self.assertEqual(updated.geometry, self.listing.geometry)
        mock_get.assert_not_called()

    def test_new_address_is_geocoded(self, mock_get):
        mock_get.return_value = mapbox_response(*DENVER)

        updated = services.update_listing(
            self.listing.pk, self.alice, {"Listing": {"location": "Denver", "country": "USA"}}
        )

        self.assertEqual(updated.geometry["coordinates"], list(DENVER))

    def test_unresolvable_address_keeps_current_point(self, mock_get):
        mock_get.return_value = mapbox_response()

        updated = services.update_listing(
            self.listing.pk, self.alice, {"location": "Nowhere", "country": "Atlantis"}
        )

        self.assertEqual(updated.location, "Nowhere")
        self.assertEqual(updated.geometry, self.listing.geometry)

    def test_new_upload_replaces_image(self, mock_get):
        upload = UploadedImage("https://img/new.jpg", "StayBnb/new")
        updated = services.update_listing(self.listing.pk, self.alice, {}, upload=upload)
        self.assertEqual(updated.image, {"url": "https://img/new.jpg", "filename": "StayBnb/new"})

    def test_bare_category_is_recovered_on_edit(self, mock_get):
        updated = services.update_listing(
            self.listing.pk, self.alice, {"Listing[title]": "Cabin", "category": "farm"}
        )
        self.assertEqual(updated.category, "farm")

    def test_non_owner_cannot_edit(self, mock_get):
        before = model_to_dict(Listing.objects.get(pk=self.listing.pk))

        with self.assertRaises(ForbiddenError):
            services.update_listing(self.listing.pk, self.bob, {"title": "Mine now"})

        self.assertEqual(model_to_dict(Listing.objects.get(pk=self.listing.pk)), before)

    def test_invalid_edit_writes_nothing(self, mock_get):
        with self.assertRaises(ValidationError):
            services.update_listing(self.listing.pk, self.alice, {"title": "", "price": "-1"})
        self.assertEqual(Listing.objects.get(pk=self.listing.pk).title, "Cabin")

    def test_unknown_listing(self, mock_get):
        with self.assertRaises(NotFoundError):
            services.update_listing(uuid.uuid4(), self.alice, {"title": "Ghost"})


class DeleteListingTests(TestCase):

    def setUp(self):
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.listing = make_listing(self.alice)

    def test_non_owner_delete_is_denied(self):
        with self.assertRaises(ForbiddenError):
            services.delete_listing(self.listing.pk, self.bob)

        listing, _ = services.get_listing(self.listing.pk)
        self.assertEqual(listing.title, "Cabin")

    def test_delete_with_two_reviews(self):
        first = attach_review(self.listing, self.bob)
        second = attach_review(self.listing, self.bob, rating=3, comment="Fine")

        services.delete_listing(self.listing.pk, self.alice)

        for review_id in (first.pk, second.pk):
            with self.assertRaises(NotFoundError):
                services.repository.get_review(review_id)
        with self.assertRaises(NotFoundError):
            services.get_listing(self.listing.pk)


class ReviewServiceTests(TestCase):

    def setUp(self):
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.listing = make_listing(self.alice)

    def test_post_review(self):
        review = services.post_review(
            self.listing.pk, self.bob, {"review": {"rating": "5", "comment": "Loved it"}}
        )

        self.assertEqual(review.author, self.bob)
        _, reviews = services.get_listing(self.listing.pk)
        self.assertEqual([r.pk for r in reviews], [review.pk])

    def test_invalid_review_is_not_saved(self):
        with self.assertRaises(ValidationError):
            services.post_review(self.listing.pk, self.bob, {"review[rating]": "9", "review[comment]": "?"})
        self.assertEqual(Review.objects.count(), 0)

    def test_review_on_missing_listing(self):
        with self.assertRaises(NotFoundError):
            services.post_review(uuid.uuid4(), self.bob, {"rating": 4, "comment": "Hm"})

    def test_only_author_can_destroy(self):
        review = attach_review(self.listing, self.bob)

        with self.assertRaises(ForbiddenError):
            services.destroy_review(self.listing.pk, review.pk, self.alice)

        services.destroy_review(self.listing.pk, review.pk, self.bob)
        self.assertFalse(Review.objects.filter(pk=review.pk).exists())
        self.assertEqual(Listing.objects.get(pk=self.listing.pk).reviews, [])
