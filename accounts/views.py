"""
Account API Views.

Implements:
- GET /auth/me/ - Current operator
- User management (admin only): list, create, update, toggle active
"""
import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.operator import Operator
from core.permissions import IsAdminRole
from .serializers import (
    CurrentOperatorSerializer,
    UserCreateSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class CurrentOperatorView(APIView):
    """
    GET: Identity and role of the authenticated operator.
    """

    def get(self, request):
        return Response(CurrentOperatorSerializer(request.user).data)


class UserListCreateView(generics.ListCreateAPIView):
    """
    GET: List users, newest first
    POST: Create a user with username, password, full_name and role
    """
    queryset = User.objects.all().order_by('-date_joined')
    permission_classes = [IsAdminRole]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return UserCreateSerializer
        return UserSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info(
            f"User {user.username} ({user.role}) created by "
            f"{Operator.from_request(self.request).name}"
        )


class UserDetailView(generics.RetrieveUpdateAPIView):
    """
    GET: Retrieve a user
    PUT/PATCH: Update full_name, role and optionally the password
    """
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]


class UserToggleActiveView(APIView):
    """
    POST: Activate a deactivated user or deactivate an active one.

    Operators cannot deactivate themselves.
    """
    permission_classes = [IsAdminRole]

    def post(self, request, pk):
        user = generics.get_object_or_404(User, pk=pk)
        if user.pk == request.user.pk:
            return Response(
                {'error': 'Validation Error', 'detail': 'You cannot deactivate your own account'},
                status=status.HTTP_400_BAD_REQUEST
            )

        user.is_active = not user.is_active
        user.save(update_fields=['is_active'])
        logger.info(f"User {user.username} {'activated' if user.is_active else 'deactivated'}")
        return Response(UserSerializer(user).data)
