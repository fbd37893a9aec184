from unittest import mock

from django.test import SimpleTestCase, override_settings

from websocket_chat import presence
from websocket_chat.delivery import MessageDelivery, inbox_group
from websocket_chat.presence import InMemoryPresenceStore, RedisPresenceStore, get_presence_store


class InMemoryPresenceStoreTest(SimpleTestCase):
    def setUp(self):
        self.store = InMemoryPresenceStore()

    def test_register_and_lookup(self):
        self.store.register(1, 'conn-a')
        self.assertTrue(self.store.is_online(1))
        self.assertFalse(self.store.is_online(2))
        self.assertEqual(self.store.lookup(1), {'conn-a'})

    def test_second_connection_does_not_replace_first(self):
        self.store.register(1, 'conn-a')
        self.store.register(1, 'conn-b')
        self.assertEqual(self.store.lookup(1), {'conn-a', 'conn-b'})

        self.assertFalse(self.store.unregister(1, 'conn-a'))
        self.assertTrue(self.store.is_online(1))
        self.assertTrue(self.store.unregister(1, 'conn-b'))
        self.assertFalse(self.store.is_online(1))

    def test_unregister_unknown_user(self):
        self.assertTrue(self.store.unregister(5, 'conn-x'))

    def test_lookup_returns_copy(self):
        self.store.register(1, 'conn-a')
        self.store.lookup(1).add('conn-z')
        self.assertEqual(self.store.lookup(1), {'conn-a'})

    def test_online_users_and_clear(self):
        self.store.register(1, 'conn-a')
        self.store.register(2, 'conn-b')
        self.assertEqual(self.store.online_users(), {1, 2})
        self.store.clear()
        self.assertEqual(self.store.online_users(), set())


class RedisPresenceStoreTest(SimpleTestCase):
    def setUp(self):
        self.client = mock.MagicMock()
        self.pipeline = self.client.pipeline.return_value
        self.unregister_script = self.client.register_script.return_value
        self.store = RedisPresenceStore(client=self.client)

    def test_register(self):
        self.store.register(3, 'conn-a')
        self.pipeline.sadd.assert_any_call('presence:user:3', 'conn-a')
        self.pipeline.sadd.assert_any_call('presence:online', 3)
        self.pipeline.execute.assert_called_once()

    def test_unregister_script_is_registered_once(self):
        self.client.register_script.assert_called_once_with(RedisPresenceStore.LUA_UNREGISTER)
        self.assertIn("SCARD", RedisPresenceStore.LUA_UNREGISTER)

    def test_unregister_last_connection(self):
        self.unregister_script.return_value = 1
        self.assertTrue(self.store.unregister(3, 'conn-a'))
        self.unregister_script.assert_called_once_with(
            keys=['presence:user:3', 'presence:online'], args=['conn-a', 3],
        )
        self.client.srem.assert_not_called()
        self.pipeline.execute.assert_not_called()

    def test_unregister_with_remaining_connections(self):
        self.unregister_script.return_value = 0
        self.assertFalse(self.store.unregister(3, 'conn-a'))
        self.client.srem.assert_not_called()

    def test_online_users(self):
        self.client.smembers.return_value = {'3', '8'}
        self.assertEqual(self.store.online_users(), {3, 8})
        self.client.smembers.assert_called_with('presence:online')


class PresenceBackendTest(SimpleTestCase):
    @override_settings(PRESENCE_BACKEND='websocket_chat.presence.InMemoryPresenceStore')
    def test_store_is_shared(self):
        with mock.patch.object(presence, '_presence_store', None):
            store = get_presence_store()
            self.assertIsInstance(store, InMemoryPresenceStore)
            self.assertIs(get_presence_store(), store)


class MessageDeliveryTest(SimpleTestCase):
    def setUp(self):
        self.store = InMemoryPresenceStore()
        self.layer = mock.AsyncMock()
        self.delivery = MessageDelivery(presence=self.store, channel_layer=self.layer)

    async def test_offline_user_gets_no_push(self):
        delivered = await self.delivery.deliver_message(2, {'id': 10, 'conversationId': 4})
        self.assertFalse(delivered)
        self.layer.group_send.assert_not_called()

    async def test_online_user_gets_push(self):
        self.store.register(2, 'conn-a')
        delivered = await self.delivery.deliver_message(2, {'id': 10, 'conversationId': 4})

        self.assertTrue(delivered)
        self.layer.group_send.assert_awaited_once_with(inbox_group(2), {
            'type': 'inbox.event',
            'event': 'new_message',
            'payload': {'message': {'id': 10, 'conversationId': 4}, 'conversationId': 4},
        })

    async def test_presence_broadcast(self):
        await self.delivery.broadcast_presence(2, 'user_online')
        group, event = self.layer.group_send.call_args[0]
        self.assertEqual(group, 'presence_broadcast')
        self.assertEqual(event['user_id'], 2)
