import html
import logging

import bleach
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from campusdeals.exceptions import Conflict, Forbidden, InvalidArgument, InvalidOperation, NotFound
from campusdeals.pagination import QueryPolicy, paginate_queryset, validate_pagination_params, validate_sort_params
from listings.services import get_listing_by_id
from users.services import get_user_by_id

from .models import MESSAGE_DELETED_CONTENT, Conversation, Message

logger = logging.getLogger(__name__)

MESSAGE_QUERY = QueryPolicy(
    allowed_sort_fields=("id", "createdAt"),
    default_sort_by="createdAt",
    sort_field_map={"createdAt": "created_at"},
)


def _iso(value):
    return value.isoformat() if value else None


class ConversationService:
    """
    Service layer for conversations and messages.

    Owns conversation identity, message persistence, read state and the
    last-message snapshot kept on each conversation.
    """

    @staticmethod
    def strip_markup(content):
        """
        Remove tags and return plain text.

        bleach escapes the text it keeps, so the result is unescaped again and
        re-cleaned until stable. Entity-encoded tags cannot survive as markup.
        """
        while True:
            cleaned = html.unescape(bleach.clean(content, tags=[], attributes={}, strip=True))
            if cleaned == content:
                return cleaned
            content = cleaned

    @staticmethod
    def sanitize_content(content):
        """Trim, strip markup from and bound message content"""
        if not isinstance(content, str):
            raise InvalidArgument("Message content must be a string", field="content")

        sanitized = ConversationService.strip_markup(content).strip()
        if not sanitized:
            raise InvalidArgument("Message content cannot be empty", field="content")

        max_length = getattr(settings, 'MESSAGE_MAX_LENGTH', 5000)
        if len(sanitized) > max_length:
            raise InvalidArgument(
                f"Message content is too long (max {max_length} characters)", field="content"
            )
        return sanitized

    @staticmethod
    def _find_conversation(user_a_id, user_b_id, listing_id):
        pair = Q(user1_id=user_a_id, user2_id=user_b_id) | Q(user1_id=user_b_id, user2_id=user_a_id)
        queryset = Conversation.objects.filter(pair)
        if listing_id is None:
            queryset = queryset.filter(listing__isnull=True)
        else:
            queryset = queryset.filter(listing_id=listing_id)
        return queryset.first()

    @staticmethod
    def resolve_conversation(user_a_id, user_b_id, listing_id=None):
        """
        Find the conversation between two users for a listing, creating it if needed.

        A conversation without a listing is distinct from one about a listing
        between the same users.
        """
        if user_a_id == user_b_id:
            raise InvalidOperation("Cannot create conversation with yourself")

        get_user_by_id(user_a_id, "Sender")
        get_user_by_id(user_b_id, "Receiver")
        if listing_id is not None:
            get_listing_by_id(listing_id)

        existing = ConversationService._find_conversation(user_a_id, user_b_id, listing_id)
        if existing:
            logger.info(
                f"Found existing conversation {existing.id} between users {user_a_id} and {user_b_id}"
            )
            return existing

        try:
            with transaction.atomic():
                conversation = Conversation.objects.create(
                    user1_id=user_a_id,
                    user2_id=user_b_id,
                    listing_id=listing_id,
                )
        except IntegrityError:
            # A concurrent sender created the same conversation first
            existing = ConversationService._find_conversation(user_a_id, user_b_id, listing_id)
            if existing:
                logger.info(f"Converged on conversation {existing.id} after concurrent create")
                return existing
            raise Conflict("Conversation already exists")

        logger.info(
            f"Created new conversation {conversation.id} between users {user_a_id} and {user_b_id}"
        )
        return conversation

    @staticmethod
    def send_message(sender_id, receiver_id, content, listing_id=None):
        """
        Persist a message and refresh the conversation snapshot in one transaction.

        Returns:
            Message: the stored message; ``conversation_id`` identifies its thread.
        """
        if sender_id == receiver_id:
            raise InvalidOperation("Cannot create conversation with yourself")

        content = ConversationService.sanitize_content(content)

        with transaction.atomic():
            conversation = ConversationService.resolve_conversation(sender_id, receiver_id, listing_id)

            message = Message.objects.create(
                conversation=conversation,
                sender_id=sender_id,
                receiver_id=receiver_id,
                content=content,
                is_read=False,
            )

            Conversation.objects.filter(pk=conversation.pk).update(
                last_message_content=content,
                last_message_at=message.created_at,
                updated_at=timezone.now(),
            )

        logger.info(f"Message {message.id} sent from user {sender_id} to {receiver_id}")
        return message

    @staticmethod
    def _participant_conversation(conversation_id, user_id):
        try:
            conversation = Conversation.objects.select_related('user1', 'user2', 'listing').get(pk=conversation_id)
        except Conversation.DoesNotExist:
            raise NotFound("Conversation not found")

        if not conversation.has_participant(user_id):
            raise Forbidden("Unauthorized to access this conversation")
        return conversation

    @staticmethod
    def _summary(conversation, user_id):
        other_user = conversation.user2 if conversation.user1_id == user_id else conversation.user1
        listing = conversation.listing
        return {
            'id': conversation.id,
            'otherUser': other_user.summary(),
            'listing': listing.summary() if listing else None,
            'lastMessage': {
                'content': conversation.last_message_content,
                'sentAt': _iso(conversation.last_message_at),
            },
            'createdAt': _iso(conversation.created_at),
            'updatedAt': _iso(conversation.updated_at),
        }

    @staticmethod
    def list_conversations_for_user(user_id):
        """Conversation summaries, most recent activity first, empty ones last."""
        conversations = (
            Conversation.objects.filter(Q(user1_id=user_id) | Q(user2_id=user_id))
            .select_related('user1', 'user2', 'listing')
            .annotate(
                unread_count=Count(
                    'messages',
                    filter=Q(messages__receiver_id=user_id, messages__is_read=False),
                )
            )
            .order_by(F('last_message_at').desc(nulls_last=True), '-id')
        )

        summaries = []
        for conversation in conversations:
            summary = ConversationService._summary(conversation, user_id)
            summary['unreadCount'] = conversation.unread_count
            summaries.append(summary)

        logger.info(f"Retrieved {len(summaries)} conversations for user {user_id}")
        return summaries

    @staticmethod
    def get_conversation(conversation_id, user_id):
        conversation = ConversationService._participant_conversation(conversation_id, user_id)
        return ConversationService._summary(conversation, user_id)

    @staticmethod
    def get_other_participant_id(conversation_id, user_id):
        conversation = ConversationService._participant_conversation(conversation_id, user_id)
        return conversation.other_participant_id(user_id)

    @staticmethod
    def list_messages(conversation_id, user_id, page=None, limit=None, sort_by=None, order=None):
        """
        Get paginated messages for a conversation, newest first by default
        """
        params = validate_pagination_params(
            page, limit, default_limit=getattr(settings, 'MESSAGES_DEFAULT_LIMIT', 50)
        )
        sort_by, order = validate_sort_params(sort_by, order, MESSAGE_QUERY)

        conversation = ConversationService._participant_conversation(conversation_id, user_id)

        def serialize(message):
            return {
                'id': message.id,
                'conversationId': message.conversation_id,
                'sender': message.sender.summary(),
                'receiverId': message.receiver_id,
                'content': message.content,
                'isRead': message.is_read,
                'readAt': _iso(message.read_at),
                'createdAt': _iso(message.created_at),
                'isMine': message.sender_id == user_id,
            }

        result = paginate_queryset(
            Message.objects.filter(conversation=conversation).select_related('sender'),
            params,
            MESSAGE_QUERY,
            sort_by,
            order,
            serialize,
        )
        logger.info(f"Retrieved {len(result['data'])} messages for conversation {conversation_id}")
        return result

    @staticmethod
    def mark_read(conversation_id, user_id):
        """
        Mark every unread message addressed to ``user_id`` in the conversation as read
        """
        ConversationService._participant_conversation(conversation_id, user_id)

        now = timezone.now()
        marked_count = Message.objects.filter(
            conversation_id=conversation_id,
            receiver_id=user_id,
            is_read=False,
        ).update(is_read=True, read_at=now, updated_at=now)

        logger.info(f"Marked {marked_count} messages as read in conversation {conversation_id}")
        return {'markedCount': marked_count}

    @staticmethod
    def delete_message(message_id, user_id):
        """Soft delete: the row stays, its content becomes the deletion marker."""
        try:
            message = Message.objects.get(pk=message_id)
        except Message.DoesNotExist:
            raise NotFound("Message not found")

        if message.sender_id != user_id:
            raise Forbidden("Unauthorized to delete this message")

        message.content = MESSAGE_DELETED_CONTENT
        message.save(update_fields=['content', 'updated_at'])

        logger.info(f"Message {message_id} deleted by user {user_id}")
        return message
