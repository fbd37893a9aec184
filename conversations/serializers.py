from rest_framework import serializers

from .models import Message


class SendMessageSerializer(serializers.Serializer):
    """Validates the body of a send-message request"""
    receiverId = serializers.IntegerField(min_value=1)
    content = serializers.CharField(
        trim_whitespace=True,
        error_messages={'blank': 'Message content cannot be empty'},
    )
    listingId = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class MessageSerializer(serializers.ModelSerializer):
    conversationId = serializers.IntegerField(source='conversation_id', read_only=True)
    senderId = serializers.IntegerField(source='sender_id', read_only=True)
    receiverId = serializers.IntegerField(source='receiver_id', read_only=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    readAt = serializers.DateTimeField(source='read_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Message
        fields = [
            'id', 'conversationId', 'senderId', 'receiverId', 'content',
            'isRead', 'readAt', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields
