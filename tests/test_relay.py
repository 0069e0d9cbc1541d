import json
import unittest

from starlette.websockets import WebSocketState

from core.relay import ALLOWED_EVENT_TYPES, NotificationRelay


class DummySocket:
    def __init__(self, state=WebSocketState.CONNECTED, fail=False):
        self.client_state = state
        self.application_state = state
        self.fail = fail
        self.sent = []

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("Cannot call send once a close message has been sent.")
        self.sent.append(json.loads(text))


class RelaySanitizeTestCase(unittest.TestCase):
    def setUp(self):
        self.relay = NotificationRelay()

    def test_allowed_types(self):
        self.assertEqual(
            ALLOWED_EVENT_TYPES,
            {"new_message", "new_post", "new_gig", "new_startup", "approval_update"},
        )

    def test_valid_message_is_reduced_to_type(self):
        self.assertEqual(
            self.relay.sanitize('{"type": "new_message", "secret": "x", "data": {"id": 1}}'),
            {"type": "new_message"},
        )
        self.assertEqual(self.relay.sanitize(b'{"type": "new_gig"}'), {"type": "new_gig"})

    def test_noise_is_dropped(self):
        for raw in (
            '{"type": "delete_everything"}',
            '{"kind": "new_post"}',
            '{"type": ["new_post"]}',
            '["new_post"]',
            'not json',
            '',
            None,
            b'\xff\xfe',
        ):
            self.assertIsNone(self.relay.sanitize(raw), raw)


class RelayBroadcastTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.relay = NotificationRelay()

    async def test_broadcast_reaches_every_open_socket_including_sender(self):
        sender, other = DummySocket(), DummySocket()
        self.relay.connect(sender)
        self.relay.connect(other)

        result = await self.relay.handle_message('{"type": "new_post", "secret": "x"}')

        self.assertEqual(result, {"type": "new_post"})
        self.assertEqual(sender.sent, [{"type": "new_post"}])
        self.assertEqual(other.sent, [{"type": "new_post"}])

    async def test_rejected_type_is_not_broadcast(self):
        a, b = DummySocket(), DummySocket()
        self.relay.connect(a)
        self.relay.connect(b)

        result = await self.relay.handle_message('{"type": "delete_everything"}')

        self.assertIsNone(result)
        self.assertEqual(a.sent, [])
        self.assertEqual(b.sent, [])

    async def test_sockets_not_open_are_skipped(self):
        open_socket = DummySocket()
        closing = DummySocket(state=WebSocketState.DISCONNECTED)
        self.relay.connect(open_socket)
        self.relay.connect(closing)

        delivered = await self.relay.broadcast({"type": "approval_update"})

        self.assertEqual(delivered, 1)
        self.assertEqual(closing.sent, [])

    async def test_failed_send_removes_socket(self):
        good, broken = DummySocket(), DummySocket(fail=True)
        self.relay.connect(good)
        self.relay.connect(broken)

        delivered = await self.relay.broadcast({"type": "new_startup"})

        self.assertEqual(delivered, 1)
        self.assertEqual(self.relay.connection_count, 1)
        self.assertEqual(good.sent, [{"type": "new_startup"}])

    async def test_disconnect_is_idempotent(self):
        socket = DummySocket()
        self.relay.connect(socket)
        self.relay.disconnect(socket)
        self.relay.disconnect(socket)
        self.assertEqual(self.relay.connection_count, 0)
        self.assertEqual(await self.relay.broadcast({"type": "new_message"}), 0)

    async def test_deeply_nested_noise_does_not_stop_relay(self):
        socket = DummySocket()
        self.relay.connect(socket)
        self.assertIsNone(await self.relay.handle_message("[" * 100000))
        await self.relay.handle_message('{"type": "new_post"}')
        self.assertEqual(socket.sent, [{"type": "new_post"}])

    async def test_late_joiner_sees_nothing_from_before(self):
        early = DummySocket()
        self.relay.connect(early)
        await self.relay.handle_message('{"type": "new_message"}')
        late = DummySocket()
        self.relay.connect(late)
        self.assertEqual(late.sent, [])


if __name__ == "__main__":
    unittest.main()
