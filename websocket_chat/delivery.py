"""
Fan-out of realtime events to users' inbox groups.

A push happens only when the presence store reports the recipient online;
otherwise the event is dropped and the recipient relies on the REST API.
"""

import logging

from asgiref.sync import async_to_sync, sync_to_async
from channels.layers import get_channel_layer

from .presence import get_presence_store

logger = logging.getLogger(__name__)

PRESENCE_GROUP = "presence_broadcast"


def inbox_group(user_id):
    return f"user_{user_id}"


def conversation_group(conversation_id):
    return f"conversation_{conversation_id}"


class MessageDelivery:

    def __init__(self, presence=None, channel_layer=None):
        self.presence = presence or get_presence_store()
        self.channel_layer = channel_layer or get_channel_layer()

    async def is_online(self, user_id):
        return await sync_to_async(self.presence.is_online)(user_id)

    async def push_to_user(self, user_id, event_type, payload):
        """Send ``event_type`` to every live connection of ``user_id``; False if offline."""
        if not await self.is_online(user_id):
            return False

        await self.channel_layer.group_send(
            inbox_group(user_id),
            {
                'type': 'inbox.event',
                'event': event_type,
                'payload': payload,
            }
        )
        return True

    async def deliver_message(self, receiver_id, message_data):
        delivered = await self.push_to_user(
            receiver_id,
            'new_message',
            {'message': message_data, 'conversationId': message_data['conversationId']},
        )
        if delivered:
            logger.info(f"Real-time message {message_data['id']} delivered to user {receiver_id}")
        else:
            logger.info(f"User {receiver_id} is offline, message {message_data['id']} saved to DB")
        return delivered

    async def broadcast_presence(self, user_id, event_type):
        """Best-effort online/offline notice to every other connected user"""
        await self.channel_layer.group_send(
            PRESENCE_GROUP,
            {
                'type': 'presence.event',
                'event': event_type,
                'user_id': user_id,
            }
        )

    async def broadcast_to_conversation(self, conversation_id, event_type, payload):
        """Send to every connection that joined the conversation room"""
        await self.channel_layer.group_send(
            conversation_group(conversation_id),
            {
                'type': 'conversation.event',
                'event': event_type,
                'payload': payload,
            }
        )

    def deliver_message_sync(self, receiver_id, message_data):
        return async_to_sync(self.deliver_message)(receiver_id, message_data)

    def broadcast_to_conversation_sync(self, conversation_id, event_type, payload):
        return async_to_sync(self.broadcast_to_conversation)(conversation_id, event_type, payload)
