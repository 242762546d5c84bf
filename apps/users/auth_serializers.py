"""Serializers for authentication flows (register, login)."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore


User = get_user_model()


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(
        max_length=255,
        error_messages={
            "required": "The name field is required.",
            "blank": "The name field is required.",
            "max_length": "The name may not be greater than 255 characters.",
        },
    )
    email = serializers.EmailField(
        max_length=255,
        error_messages={
            "required": "The email field is required.",
            "blank": "The email field is required.",
            "invalid": "The email must be a valid email address.",
            "max_length": "The email may not be greater than 255 characters.",
        },
    )
    password = serializers.CharField(
        min_length=6,
        write_only=True,
        trim_whitespace=False,
        error_messages={
            "required": "The password field is required.",
            "blank": "The password field is required.",
            "min_length": "The password must be at least 6 characters.",
        },
    )

    def validate_email(self, value: str) -> str:
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("The email has already been taken.")
        return value

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(
        error_messages={
            "required": "The email field is required.",
            "blank": "The email field is required.",
            "invalid": "The email must be a valid email address.",
        },
    )
    password = serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        error_messages={
            "required": "The password field is required.",
            "blank": "The password field is required.",
        },
    )
