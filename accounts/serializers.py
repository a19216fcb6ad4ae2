"""
Serializers for operator accounts.
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Read/update serializer; a new password is optional on update."""
    password = serializers.CharField(
        write_only=True,
        required=False,
        allow_blank=True,
        min_length=6,
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['id', 'username', 'full_name', 'role', 'is_active', 'password', 'date_joined']
        read_only_fields = ['id', 'username', 'is_active', 'date_joined']

    def update(self, instance, validated_data):
        password = validated_data.pop('password', '')
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['id', 'username', 'full_name', 'role', 'password']
        read_only_fields = ['id']

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


class CurrentOperatorSerializer(serializers.ModelSerializer):
    is_admin = serializers.BooleanField(source='is_admin_role', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'full_name', 'role', 'is_admin']
