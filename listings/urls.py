# listings/urls.py

from django.urls import path
from . import views

urlpatterns = [
    path('', views.listing_list, name='listing-list'),
    path('<str:listing_id>/', views.listing_detail, name='listing-detail'),

    # Reviews nested under their listing
    path('<str:listing_id>/reviews/', views.review_create, name='review-create'),
    path('<str:listing_id>/reviews/<str:review_id>/', views.review_delete, name='review-delete'),
]
