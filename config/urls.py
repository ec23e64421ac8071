"""
URL configuration for the StayBnb project.

The `urlpatterns` list routes URLs to views.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from django.http import HttpResponse


def home(request):
    return HttpResponse("Welcome to StayBnb!")


urlpatterns = [
    # Root/Homepage
    path('', home, name='home'),

    # Admin Interface
    path('admin/', admin.site.urls),

    # Register, Login, Profile
    path('api/', include('accounts.urls')),

    path('api/listings/', include('listings.urls')),
]

# Serve static and media files during development ONLY
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
