"""Serializers for staff accounts and login."""
from rest_framework import serializers
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from .models import User


class UserSerializer(serializers.ModelSerializer):
    is_manager = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role', 'is_manager', 'is_active', 'created_at']
        read_only_fields = ['id', 'email', 'created_at']


class StaffAccountSerializer(serializers.ModelSerializer):
    """Account creation by an admin; the role is chosen up front."""
    password = serializers.CharField(write_only=True, validators=[validate_password])

    class Meta:
        model = User
        fields = ['email', 'name', 'role', 'password']

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email=value).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            is_staff=validated_data.get('role') == User.Role.ADMIN,
            **validated_data
        )


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get('request'),
            username=attrs['email'].lower(),
            password=attrs['password'],
        )
        # ModelBackend already refuses inactive accounts
        if user is None:
            raise serializers.ValidationError({'detail': 'Invalid email or password.'})
        attrs['user'] = user
        return attrs
