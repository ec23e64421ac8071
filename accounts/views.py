# accounts/views.py
import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .serializers import UserSerializer

logger = logging.getLogger(__name__)


def _user_payload(user):
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "date_joined": user.date_joined,
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """
    API Endpoint: POST /api/register/
    Registers a new user and signs them in straight away.
    Expects: username, email, password
    """
    serializer = UserSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = serializer.save()
    token, _ = Token.objects.get_or_create(user=user)
    logger.info("Registered user %s", user.pk)

    return Response({
        "message": "Welcome to StayBnb!",
        "token": token.key,
        "user": _user_payload(user),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """
    API Endpoint: POST /api/login/
    Authenticates by username and password and returns a fresh token.
    """
    username = request.data.get('username')
    password = request.data.get('password')

    if not username or not password:
        return Response({
            "error": "Username and password are required."
        }, status=status.HTTP_400_BAD_REQUEST)

    user = authenticate(username=username, password=password)
    if not user:
        return Response({
            "error": "Invalid credentials."
        }, status=status.HTTP_401_UNAUTHORIZED)

    # One live token per user
    Token.objects.filter(user=user).delete()
    token = Token.objects.create(user=user)

    return Response({
        "message": "Welcome back to StayBnb!",
        "token": token.key,
        "user": _user_payload(user),
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile(request):
    """
    API Endpoint: GET /api/profile/
    Returns the authenticated user's profile.
    """
    return Response(_user_payload(request.user))
