from django.core.validators import RegexValidator
from rest_framework import serializers

from .models import Campus, Category, Listing

slug_validator = RegexValidator(
    r"^[a-z0-9-]+$", "Slug must contain only lowercase letters, numbers, or dashes"
)


class CampusSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Campus
        fields = ["id", "name", "slug", "lat", "lon", "createdAt", "updatedAt"]


class CategorySerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "createdAt", "updatedAt"]


class ListingSerializer(serializers.ModelSerializer):
    sellerId = serializers.IntegerField(source="seller_id", read_only=True)
    categoryId = serializers.IntegerField(source="category_id", read_only=True, allow_null=True)
    campusId = serializers.IntegerField(source="campus_id", read_only=True, allow_null=True)
    isAvailable = serializers.BooleanField(source="is_available", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Listing
        fields = [
            "id", "title", "description", "price", "condition", "sellerId",
            "categoryId", "campusId", "isAvailable", "createdAt", "updatedAt",
        ]


class CampusWriteSerializer(serializers.Serializer):
    """Body of campus create/update requests; updates validate with ``partial=True``"""
    name = serializers.CharField(min_length=2, max_length=255)
    slug = serializers.CharField(min_length=2, max_length=255, validators=[slug_validator])
    lat = serializers.DecimalField(
        max_digits=9, decimal_places=6, min_value=-90, max_value=90, required=False, allow_null=True
    )
    lon = serializers.DecimalField(
        max_digits=9, decimal_places=6, min_value=-180, max_value=180, required=False, allow_null=True
    )


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=255)
    slug = serializers.CharField(min_length=2, max_length=255, validators=[slug_validator], required=False)
    description = serializers.CharField(max_length=500, allow_blank=True)
