from rest_framework import serializers

from listings.serializers import ListingSerializer

from .models import Favorite


class FavoriteSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source='user_id', read_only=True)
    listingId = serializers.IntegerField(source='listing_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Favorite
        fields = ['id', 'userId', 'listingId', 'createdAt']
        read_only_fields = fields


class FavoriteListingSerializer(FavoriteSerializer):
    """A favorite together with the listing it points at"""
    listing = ListingSerializer(read_only=True)

    class Meta(FavoriteSerializer.Meta):
        fields = FavoriteSerializer.Meta.fields + ['listing']
        read_only_fields = fields
