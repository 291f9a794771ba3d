"""Views for staff login, profile and account administration."""
import logging

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema, OpenApiExample
from rest_framework import serializers as drf_serializers

from .models import User
from .permissions import IsAdmin
from .serializers import StaffAccountSerializer, UserLoginSerializer, UserSerializer

logger = logging.getLogger(__name__)


# Response serializers for Swagger documentation
class TokenPairSerializer(drf_serializers.Serializer):
    refresh = drf_serializers.CharField()
    access = drf_serializers.CharField()


class LoginResponseSerializer(drf_serializers.Serializer):
    user = UserSerializer()
    tokens = TokenPairSerializer()


def _issue_tokens(user):
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    return {'refresh': str(refresh), 'access': str(refresh.access_token)}


class LoginView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Staff login",
        description="Exchange email and password for a JWT pair. The role is carried as a token claim.",
        request=UserLoginSerializer,
        responses={200: LoginResponseSerializer},
        examples=[
            OpenApiExample(
                "Manager login",
                value={"email": "manager@busops.local", "password": "Manager@123"},
                request_only=True
            )
        ],
        tags=["Authentication"]
    )
    def post(self, request):
        serializer = UserLoginSerializer(data=request.data, context={'request': request})
        if not serializer.is_valid():
            logger.warning("Failed login for %s", request.data.get('email'))
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = serializer.validated_data['user']
        User.objects.filter(pk=user.pk).update(last_login=timezone.now())
        logger.info("%s %s logged in", user.role, user.email)
        return Response({'user': UserSerializer(user).data, 'tokens': _issue_tokens(user)})


class UserProfileView(APIView):

    @extend_schema(summary="Current staff user", responses={200: UserSerializer}, tags=["Authentication"])
    def get(self, request):
        return Response(UserSerializer(request.user).data)


class StaffAccountListView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(summary="List staff accounts (Admin)", responses={200: UserSerializer(many=True)},
                   tags=["Accounts"])
    def get(self, request):
        users = User.objects.order_by('name')
        return Response({'count': users.count(), 'results': UserSerializer(users, many=True).data})

    @extend_schema(
        summary="Create a staff account (Admin)",
        request=StaffAccountSerializer,
        responses={201: UserSerializer},
        examples=[
            OpenApiExample(
                "Clerk account",
                value={"email": "clerk@busops.local", "name": "Casey Clerk",
                       "role": "Employee", "password": "Clerk@12345"},
                request_only=True
            )
        ],
        tags=["Accounts"]
    )
    def post(self, request):
        serializer = StaffAccountSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        user = serializer.save()
        logger.info("Account %s (%s) created by %s", user.email, user.role, request.user.email)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class StaffAccountDetailView(APIView):
    """Change an account's role or disable it. Accounts are never hard-deleted."""
    permission_classes = [IsAdmin]

    @extend_schema(summary="Update a staff account (Admin)", request=UserSerializer,
                   responses={200: UserSerializer}, tags=["Accounts"])
    def patch(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        serializer = UserSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        if user == request.user and serializer.validated_data.get('is_active') is False:
            return Response({'error': 'You cannot disable your own account.'}, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        return Response(serializer.data)
