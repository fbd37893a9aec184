from rest_framework import serializers

from .models import Review


class ReviewCreateSerializer(serializers.Serializer):
    rating = serializers.ChoiceField(choices=Review.RATING_CHOICES)
    review = serializers.CharField(min_length=30)


class ReviewUpdateSerializer(serializers.Serializer):
    rating = serializers.ChoiceField(choices=Review.RATING_CHOICES, required=False)
    review = serializers.CharField(min_length=1, required=False)


class ReviewSerializer(serializers.ModelSerializer):
    reviewerId = serializers.IntegerField(source='reviewer_id', read_only=True)
    revieweeId = serializers.IntegerField(source='reviewee_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'reviewerId', 'revieweeId', 'rating', 'review', 'createdAt', 'updatedAt']
        read_only_fields = fields
