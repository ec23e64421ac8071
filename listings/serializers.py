# listings/serializers.py

from rest_framework import serializers
from .models import Listing, Review


class ReviewSerializer(serializers.ModelSerializer):
    author = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ['id', 'rating', 'comment', 'author', 'created_at']

    def get_author(self, obj):
        return {"id": obj.author_id, "username": obj.author.username}


class ListingSerializer(serializers.ModelSerializer):
    """
    Read-side representation of a listing.
    Pass ``reviews`` in the serializer context to embed them in stored order.
    """
    owner = serializers.SerializerMethodField()
    latlng = serializers.ReadOnlyField()
    reviews = serializers.SerializerMethodField()

    class Meta:
        model = Listing
        fields = [
            'id',
            'title',
            'description',
            'price',
            'location',
            'country',
            'category',
            'image',
            'geometry',
            'latlng',
            'owner',
            'reviews',
            'created_at',
            'updated_at',
        ]

    def get_owner(self, obj):
        if obj.owner is None:
            return None
        return {"id": obj.owner_id, "username": obj.owner.username}

    def get_reviews(self, obj):
        reviews = self.context.get('reviews')
        if reviews is None:
            return obj.review_ids()
        return ReviewSerializer(reviews, many=True).data


class ListingSummarySerializer(serializers.ModelSerializer):
    """
    Compact serializer for the index page.
    """
    owner = serializers.CharField(source='owner.username', default=None, read_only=True)

    class Meta:
        model = Listing
        fields = [
            'id', 'title', 'price', 'location', 'country',
            'category', 'image', 'latlng', 'owner',
        ]
