from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    isVerified = serializers.BooleanField(source="is_verified", read_only=True)
    reviewStats = serializers.DictField(source="review_stats", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "phone", "role", "isVerified", "reviewStats", "createdAt", "updatedAt"]
        read_only_fields = fields
