# listings/models.py
import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

# Closed set of listing categories
CATEGORY_CHOICES = [
    ('trending', 'Trending'),
    ('beach', 'Beach'),
    ('room', 'Room'),
    ('dome', 'Dome'),
    ('castle', 'Castle'),
    ('camping', 'Camping'),
    ('boat', 'Boat'),
    ('pool', 'Pool'),
    ('mountain', 'Mountain'),
    ('iconic-cities', 'Iconic Cities'),
    ('farm', 'Farm'),
    ('arctic', 'Arctic'),
]
CATEGORY_VALUES = [value for value, _ in CATEGORY_CHOICES]
DEFAULT_CATEGORY = 'trending'


def default_point():
    return {"type": "Point", "coordinates": [0, 0]}


class Listing(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Only nullable so legacy orphans can exist until repaired
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='listings'
    )

    title = models.CharField(max_length=200)
    description = models.TextField()
    price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, default='')
    country = models.CharField(max_length=100, blank=True, default='')
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=DEFAULT_CATEGORY)

    # {"url": ..., "filename": ...} of the Cloudinary asset
    image = models.JSONField(blank=True, null=True)

    # GeoJSON point, coordinates are [lng, lat]
    geometry = models.JSONField(default=default_point)

    # Ordered review ids; the listing owns this relationship
    reviews = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def latlng(self):
        """[lat, lng] for map widgets, or None when no point is stored."""
        coordinates = (self.geometry or {}).get('coordinates')
        if coordinates and len(coordinates) == 2:
            return [coordinates[1], coordinates[0]]
        return None

    def review_ids(self):
        if not isinstance(self.reviews, list):
            return []
        return [str(review_id) for review_id in self.reviews]

    def add_review_id(self, review_id):
        """Append a review id, keeping insertion order and no duplicates."""
        ids = self.review_ids()
        if str(review_id) not in ids:
            ids.append(str(review_id))
        self.reviews = ids

    def remove_review_id(self, review_id):
        self.reviews = [rid for rid in self.review_ids() if rid != str(review_id)]

    def __str__(self):
        return f"{self.title} ({self.get_category_display()})"

    class Meta:
        ordering = ['-created_at']


class Review(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField()
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reviews'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.rating}/5 by {self.author}"

    class Meta:
        ordering = ['created_at']
