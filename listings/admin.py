# listings/admin.py

from django.contrib import admin
from django.utils.html import format_html  # For rich display
from .models import Listing, Review
from .repository import ListingRepository

repository = ListingRepository()


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):

    # === CUSTOM COLUMNS FOR LIST VIEW ===

    def owner_name(self, obj):
        if obj.owner is None:
            return format_html("<strong style='color:red'>{}</strong>", "NO OWNER")
        return f"{obj.owner.username} ({obj.owner.email})"
    owner_name.short_description = "Owner"
    owner_name.admin_order_field = 'owner__username'

    def image_thumbnail(self, obj):
        if not obj.image or not obj.image.get('url'):
            return "-"
        return format_html(
            '<img src="{}" style="width:60px; height:40px; object-fit:cover; border-radius:4px;" />',
            obj.image['url']
        )
    image_thumbnail.short_description = "Image"

    def coordinates(self, obj):
        latlng = obj.latlng
        if not latlng:
            return "-"
        return format_html("<small>{}, {}</small>", latlng[0], latlng[1])
    coordinates.short_description = "Lat / Lng"

    def review_count(self, obj):
        return len(obj.review_ids())
    review_count.short_description = "Reviews"

    list_display = (
        'title',
        'owner_name',
        'category',
        'price',
        'location',
        'country',
        'coordinates',
        'image_thumbnail',
        'review_count',
        'created_at',
    )
    list_filter = ('category', 'country', 'created_at')
    search_fields = ('title', 'description', 'location', 'country', 'owner__username', 'owner__email')
    readonly_fields = ('geometry', 'reviews', 'created_at', 'updated_at')

    # Deletes from the admin must take the listing's reviews with them
    def delete_model(self, request, obj):
        repository.delete(obj.pk)

    def delete_queryset(self, request, queryset):
        for listing in queryset:
            repository.delete(listing.pk)


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'rating', 'author', 'created_at')
    list_filter = ('rating', 'created_at')
    search_fields = ('comment', 'author__username')
