from django.contrib.auth import authenticate, logout, login
from django.http import JsonResponse
from django.middleware.csrf import get_token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status
from rest_framework.response import Response

from .models import Profile
from .serializers import (
    UserSerializer,
    ProfileSerializer,
    ProfileUpdateSerializer,
    LeaderboardEntrySerializer,
)


@api_view(['GET'])
@permission_classes([AllowAny])
def csrf(request):
    return JsonResponse({'csrfToken': get_token(request)})


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    serializer = UserSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        login(request, user)
        return Response(ProfileSerializer(user.profile).data, status=status.HTTP_201_CREATED)

    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    username = request.data.get('username')
    password = request.data.get('password')

    user = authenticate(username=username, password=password)
    if user:
        login(request, user)
        return Response(ProfileSerializer(user.profile).data)

    return Response({'error': 'Invalid credentials'}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    logout(request)
    return Response({'message': 'Logged out successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    return Response(ProfileSerializer(Profile.objects.get(user=request.user)).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def update_profile(request):
    profile = Profile.objects.get(user=request.user)
    serializer = ProfileUpdateSerializer(profile, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    serializer.save()
    return Response({"success": True, "profile": ProfileSerializer(profile).data})


@api_view(["GET"])
@permission_classes([AllowAny])
def leaderboard(request):
    try:
        limit = min(int(request.query_params.get("limit", 10)), 100)
    except ValueError:
        return Response({"error": "Invalid limit"}, status=status.HTTP_400_BAD_REQUEST)

    top = Profile.objects.order_by("-total_games_won", "-points_balance", "username")[:limit]
    return Response(LeaderboardEntrySerializer(top, many=True).data)
