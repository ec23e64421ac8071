# listings/views.py

import functools
import logging

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from . import services
from .exceptions import ListingError
from .serializers import ListingSerializer, ListingSummarySerializer, ReviewSerializer

logger = logging.getLogger(__name__)

LISTINGS_URL = "/listings"

ERROR_STATUS = {
    'validation': status.HTTP_400_BAD_REQUEST,
    'not_found': status.HTTP_404_NOT_FOUND,
    'forbidden': status.HTTP_403_FORBIDDEN,
    'upload_failed': status.HTTP_502_BAD_GATEWAY,
    'persistence': status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def redirect_for(kind, listing_id=None, form=None):
    """
    Where the client should send the user after an error.

    not_found -> the listing collection
    forbidden -> the listing's read view
    anything else -> the form the submission came from
    """
    if kind == 'not_found':
        return LISTINGS_URL
    if form == 'new' and kind != 'forbidden':
        return f"{LISTINGS_URL}/new"
    if listing_id is None:
        return LISTINGS_URL
    if form == 'edit' and kind != 'forbidden':
        return f"{LISTINGS_URL}/{listing_id}/edit"
    return f"{LISTINGS_URL}/{listing_id}"


def error_response(exc, listing_id=None, form=None, submitted=None):
    payload = exc.as_dict()
    payload['redirect'] = redirect_for(exc.kind, listing_id, form)
    if getattr(exc, 'fields', None):
        payload['fields'] = {field: [str(m) for m in messages] for field, messages in exc.fields.items()}
    if submitted is not None:
        # Lets the client re-render the form with what the user typed
        payload['submitted'] = submitted
    return Response(payload, status=ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST))


def handles_listing_errors(form_for=None):
    """Turn pipeline errors into tagged error responses."""
    def decorator(view):
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            try:
                return view(request, *args, **kwargs)
            except ListingError as exc:
                listing_id = kwargs.get('listing_id')
                form = form_for(request) if form_for else None
                submitted = None
                if exc.kind == 'validation' and request.method in ('POST', 'PUT', 'PATCH'):
                    submitted = _submitted_fields(request)
                return error_response(exc, listing_id, form, submitted)
        return wrapper
    return decorator


def _listing_form(request):
    if request.method == 'POST':
        return 'new'
    if request.method in ('PUT', 'PATCH'):
        return 'edit'
    return None


def _submitted_fields(request):
    """request.data without the file part."""
    data = request.data
    if hasattr(data, 'dict'):
        return {key: value for key, value in data.items() if key != 'image'}
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
@parser_classes([MultiPartParser, FormParser, JSONParser])
@handles_listing_errors(form_for=_listing_form)
def listing_list(request):
    if request.method == 'GET':
        listings = services.list_listings(
            category=request.query_params.get('category'),
            search=request.query_params.get('search'),
        )
        payload = {"results": ListingSummarySerializer(listings, many=True).data}
        if not listings and (request.query_params.get('category') or request.query_params.get('search')):
            payload["message"] = "No listings found for your search."
        return Response(payload, status=status.HTTP_200_OK)

    listing = services.create_listing(
        request.user,
        _submitted_fields(request),
        image_file=request.FILES.get('image')
    )
    return Response({
        "message": "Listing created successfully!",
        "listing": ListingSerializer(listing).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticatedOrReadOnly])
@parser_classes([MultiPartParser, FormParser, JSONParser])
@handles_listing_errors(form_for=_listing_form)
def listing_detail(request, listing_id):
    if request.method == 'GET':
        listing, reviews = services.get_listing(listing_id)
        serializer = ListingSerializer(listing, context={'reviews': reviews})
        return Response(serializer.data, status=status.HTTP_200_OK)

    if request.method == 'DELETE':
        services.delete_listing(listing_id, request.user)
        return Response({"message": "Listing deleted!", "redirect": LISTINGS_URL}, status=status.HTTP_200_OK)

    listing = services.update_listing(
        listing_id,
        request.user,
        _submitted_fields(request),
        image_file=request.FILES.get('image')
    )
    return Response({
        "message": "Listing updated!",
        "listing": ListingSerializer(listing).data,
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([FormParser, JSONParser, MultiPartParser])
@handles_listing_errors()
def review_create(request, listing_id):
    review = services.post_review(listing_id, request.user, request.data)
    return Response({
        "message": "Review added successfully!",
        "review": ReviewSerializer(review).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
@handles_listing_errors()
def review_delete(request, listing_id, review_id):
    services.destroy_review(listing_id, review_id, request.user)
    return Response({
        "message": "Review Deleted!",
        "redirect": f"{LISTINGS_URL}/{listing_id}",
    }, status=status.HTTP_200_OK)
