import asyncio
import json
import logging
import time

from asgiref.sync import sync_to_async
from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings

from campusdeals.exceptions import CampusDealsError, InvalidArgument
from conversations.serializers import MessageSerializer
from conversations.services import ConversationService

from .delivery import PRESENCE_GROUP, MessageDelivery, conversation_group, inbox_group

logger = logging.getLogger(__name__)


def parse_id(value, name, required=True):
    """Positive integer id from a client frame"""
    if value is None or value == '':
        if required:
            raise InvalidArgument(f"{name} is required", field=name)
        return None
    if isinstance(value, bool):
        raise InvalidArgument(f"{name} must be a positive integer", field=name)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{name} must be a positive integer", field=name)
    if parsed <= 0:
        raise InvalidArgument(f"{name} must be a positive integer", field=name)
    return parsed


class ChatConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for real-time messaging.

    Each connection joins its user's inbox group and the shared presence
    group. Messages are persisted through ConversationService and pushed to
    the receiver only while the receiver has a live connection.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = None
        self.delivery = None
        self.conversation_groups = set()
        self.heartbeat_task = None

    async def connect(self):
        """Register presence and announce the user once the handshake is authenticated"""
        self.user_id = self.scope.get('user_id')
        if not self.user_id:
            await self.close(code=4001)
            return

        self.delivery = MessageDelivery()

        await self.channel_layer.group_add(inbox_group(self.user_id), self.channel_name)
        await self.channel_layer.group_add(PRESENCE_GROUP, self.channel_name)
        await self.accept()

        await sync_to_async(self.delivery.presence.register)(self.user_id, self.channel_name)
        self.heartbeat_task = asyncio.create_task(self.heartbeat_loop())
        logger.info(f"User {self.user_id} connected via websocket ({self.channel_name})")

        await self.send_event('connected', {
            'userId': self.user_id,
            'connectionId': self.channel_name,
            'message': 'Successfully connected to real-time messaging',
        })
        await self.delivery.broadcast_presence(self.user_id, 'user_online')

    async def disconnect(self, code):
        """Drop this connection from presence; announce offline when it was the last one"""
        if self.heartbeat_task:
            self.heartbeat_task.cancel()

        if not self.user_id or self.delivery is None:
            return

        for group in list(self.conversation_groups):
            await self.channel_layer.group_discard(group, self.channel_name)
        self.conversation_groups.clear()

        await self.channel_layer.group_discard(inbox_group(self.user_id), self.channel_name)
        await self.channel_layer.group_discard(PRESENCE_GROUP, self.channel_name)

        went_offline = await sync_to_async(self.delivery.presence.unregister)(self.user_id, self.channel_name)
        logger.info(f"User {self.user_id} disconnected ({self.channel_name})")

        if went_offline:
            await self.delivery.broadcast_presence(self.user_id, 'user_offline')

    async def receive(self, text_data=None, bytes_data=None):
        """Handle incoming WebSocket messages"""
        if text_data is None:
            await self.send_error("Binary frames are not supported")
            return

        if len(text_data) > settings.WEBSOCKET_MAX_MESSAGE_SIZE:
            await self.send_error("Message too large")
            return

        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send_error("Invalid JSON format")
            return

        if not isinstance(data, dict):
            await self.send_error("Invalid message format")
            return

        message_type = data.get('type')

        try:
            if message_type == 'send_message':
                await self.handle_send_message(data)
            elif message_type == 'join_conversation':
                await self.handle_join_conversation(data)
            elif message_type == 'leave_conversation':
                await self.handle_leave_conversation(data)
            elif message_type == 'mark_as_read':
                await self.handle_mark_as_read(data)
            elif message_type == 'typing_start':
                await self.handle_typing(data, 'user_typing')
            elif message_type == 'typing_stop':
                await self.handle_typing(data, 'user_stopped_typing')
            elif message_type == 'get_online_users':
                await self.handle_get_online_users()
            elif message_type == 'heartbeat':
                await self.send_event('heartbeat_response', {'timestamp': time.time()})
            else:
                await self.send_error("Unknown message type")
        except CampusDealsError as e:
            logger.warning(f"Error in {message_type} event from user {self.user_id}: {e.message}")
            await self.send_error(e.message, e.kind)
        except Exception:
            logger.exception(f"Unexpected error in {message_type} event from user {self.user_id}")
            await self.send_error("Internal server error", 'internal')

    async def handle_send_message(self, data):
        receiver_id = parse_id(data.get('receiverId'), 'receiverId')
        listing_id = parse_id(data.get('listingId'), 'listingId', required=False)
        content = data.get('content')
        if not content:
            raise InvalidArgument("Invalid message data", field='content')

        message = await self.save_message(receiver_id, content, listing_id)

        await self.send_event('message_sent', {
            'message': message,
            'conversationId': message['conversationId'],
        })
        await self.delivery.deliver_message(receiver_id, message)

        logger.info(f"Message from {self.user_id} to {receiver_id} sent successfully")

    async def handle_join_conversation(self, data):
        conversation_id = parse_id(data.get('conversationId'), 'conversationId')
        await self.get_conversation(conversation_id)

        group = conversation_group(conversation_id)
        await self.channel_layer.group_add(group, self.channel_name)
        self.conversation_groups.add(group)

        await self.send_event('joined_conversation', {
            'conversationId': conversation_id,
            'message': f"Joined conversation {conversation_id}",
        })
        logger.info(f"User {self.user_id} joined conversation {conversation_id} room")

    async def handle_leave_conversation(self, data):
        conversation_id = parse_id(data.get('conversationId'), 'conversationId')
        await self.get_conversation(conversation_id)

        group = conversation_group(conversation_id)
        await self.channel_layer.group_discard(group, self.channel_name)
        self.conversation_groups.discard(group)

        await self.send_event('left_conversation', {
            'conversationId': conversation_id,
            'message': f"Left conversation {conversation_id}",
        })
        logger.info(f"User {self.user_id} left conversation {conversation_id} room")

    async def handle_mark_as_read(self, data):
        conversation_id = parse_id(data.get('conversationId'), 'conversationId')
        result = await self.mark_read(conversation_id)

        await self.send_event('marked_as_read', {
            'conversationId': conversation_id,
            'markedCount': result['markedCount'],
        })

        other_user_id = await self.get_other_participant_id(conversation_id)
        await self.delivery.push_to_user(other_user_id, 'messages_read', {
            'conversationId': conversation_id,
            'readByUserId': self.user_id,
        })

    async def handle_typing(self, data, event_type):
        """Typing indicators are ephemeral: forwarded if the receiver is online, else dropped"""
        receiver_id = parse_id(data.get('receiverId'), 'receiverId')
        conversation_id = parse_id(data.get('conversationId'), 'conversationId', required=False)

        await self.delivery.push_to_user(receiver_id, event_type, {
            'conversationId': conversation_id,
            'userId': self.user_id,
        })

    async def handle_get_online_users(self):
        users = await sync_to_async(self.delivery.presence.online_users)()
        await self.send_event('online_users', {'users': sorted(users)})

    async def inbox_event(self, event):
        """Event pushed to this user's inbox group"""
        await self.send_event(event['event'], event['payload'])

    async def conversation_event(self, event):
        """Event broadcast to a conversation room this connection joined"""
        await self.send_event(event['event'], event['payload'])

    async def presence_event(self, event):
        if event['user_id'] == self.user_id:
            return
        await self.send_event(event['event'], {'userId': event['user_id']})

    async def heartbeat_loop(self):
        """Send periodic heartbeat to keep connection alive"""
        while True:
            try:
                await asyncio.sleep(settings.WEBSOCKET_HEARTBEAT_INTERVAL)
                await self.send_event('heartbeat', {'timestamp': time.time()})
            except asyncio.CancelledError:
                break

    async def send_event(self, event_type, payload):
        await self.send(text_data=json.dumps({'type': event_type, **payload}))

    async def send_error(self, message, error='invalid_argument'):
        """Send error message to client"""
        await self.send_event('error', {'message': message, 'error': error})

    @database_sync_to_async
    def save_message(self, receiver_id, content, listing_id):
        message = ConversationService.send_message(self.user_id, receiver_id, content, listing_id)
        return dict(MessageSerializer(message).data)

    @database_sync_to_async
    def get_conversation(self, conversation_id):
        return ConversationService.get_conversation(conversation_id, self.user_id)

    @database_sync_to_async
    def mark_read(self, conversation_id):
        return ConversationService.mark_read(conversation_id, self.user_id)

    @database_sync_to_async
    def get_other_participant_id(self, conversation_id):
        return ConversationService.get_other_participant_id(conversation_id, self.user_id)
