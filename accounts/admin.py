from django.contrib import admin
from django.contrib.auth import get_user_model
from django.db.models import Count

User = get_user_model()


@admin.register(User)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "username",
        "email",
        "listing_count",
        "review_count",
        "is_staff",
        "date_joined",
    )
    search_fields = ("username", "email")
    list_filter = ("is_staff", "is_active")
    ordering = ("-date_joined",)

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            _listing_count=Count("listings", distinct=True),
            _review_count=Count("reviews", distinct=True),
        )

    @admin.display(description="Listings", ordering="_listing_count")
    def listing_count(self, obj):
        return obj._listing_count

    @admin.display(description="Reviews", ordering="_review_count")
    def review_count(self, obj):
        return obj._review_count
