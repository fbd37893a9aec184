import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from campusdeals.views import parse_path_id
from websocket_chat.delivery import MessageDelivery

from .serializers import MessageSerializer, SendMessageSerializer
from .services import ConversationService

logger = logging.getLogger(__name__)


class MessageCreateView(APIView):
    """Send a message; the receiver gets it in real time when connected"""

    def post(self, request):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = ConversationService.send_message(
            request.user.id,
            serializer.validated_data['receiverId'],
            serializer.validated_data['content'],
            serializer.validated_data.get('listingId'),
        )
        data = MessageSerializer(message).data

        try:
            MessageDelivery().deliver_message_sync(message.receiver_id, dict(data))
        except Exception:
            # The message is stored; the receiver will see it over REST
            logger.exception(f"Realtime delivery failed for message {message.id}")

        return Response({
            "message": "Message sent successfully",
            "data": data,
        }, status=status.HTTP_201_CREATED)


class MessageDeleteView(APIView):

    def delete(self, request, message_id):
        message = ConversationService.delete_message(
            parse_path_id(message_id, "message ID"), request.user.id
        )
        data = MessageSerializer(message).data

        try:
            MessageDelivery().broadcast_to_conversation_sync(message.conversation_id, 'message_deleted', {
                'messageId': message.id,
                'conversationId': message.conversation_id,
            })
        except Exception:
            logger.exception(f"Realtime delete notice failed for message {message.id}")

        return Response({
            "message": "Message deleted successfully",
            "data": data,
        })


class ConversationListView(APIView):
    """All conversations of the authenticated user, most recent first"""

    def get(self, request):
        conversations = ConversationService.list_conversations_for_user(request.user.id)
        return Response({
            "message": "Conversations retrieved successfully",
            "data": conversations,
        })


class ConversationDetailView(APIView):

    def get(self, request, conversation_id):
        conversation = ConversationService.get_conversation(
            parse_path_id(conversation_id, "conversation ID"), request.user.id
        )
        return Response({
            "message": "Conversation retrieved successfully",
            "data": conversation,
        })


class ConversationMessagesView(APIView):
    """Paginated messages of a conversation, newest first unless ``order=asc``"""

    def get(self, request, conversation_id):
        params = request.query_params
        result = ConversationService.list_messages(
            parse_path_id(conversation_id, "conversation ID"),
            request.user.id,
            page=params.get('page'),
            limit=params.get('limit'),
            sort_by=params.get('sortBy'),
            order=params.get('order'),
        )
        return Response({
            "message": "Messages retrieved successfully",
            "meta": result["meta"],
            "data": result["data"],
        })


class ConversationReadView(APIView):

    def patch(self, request, conversation_id):
        result = ConversationService.mark_read(
            parse_path_id(conversation_id, "conversation ID"), request.user.id
        )
        return Response({
            "message": "Messages marked as read",
            "data": result,
        })
