import time
import unittest

from fastapi.testclient import TestClient

from core.relay import relay
from web import app


def _wait_for_clients(count: int, timeout: float = 2.0) -> None:
    deadline = time.time() + timeout
    while relay.connection_count < count and time.time() < deadline:
        time.sleep(0.01)


class RelayEndpointTestCase(unittest.TestCase):
    def test_broadcast_reaches_every_client_including_sender(self):
        with TestClient(app) as client:
            base = relay.connection_count
            with client.websocket_connect("/ws") as ws1, client.websocket_connect("/ws") as ws2:
                _wait_for_clients(base + 2)
                ws1.send_json({"type": "new_post"})
                self.assertEqual(ws2.receive_json(), {"type": "new_post"})
                self.assertEqual(ws1.receive_json(), {"type": "new_post"})

    def test_invalid_messages_are_dropped_and_extra_fields_stripped(self):
        with TestClient(app) as client:
            base = relay.connection_count
            with client.websocket_connect("/ws") as ws1, client.websocket_connect("/ws") as ws2:
                _wait_for_clients(base + 2)
                ws1.send_json({"type": "delete_everything"})
                ws1.send_text("not json")
                ws1.send_json({"type": "new_gig", "payload": {"id": "x"}, "user_id": "someone"})
                # 非法消息静默丢弃，第一条收到的就是合法通知
                self.assertEqual(ws2.receive_json(), {"type": "new_gig"})
                self.assertEqual(ws1.receive_json(), {"type": "new_gig"})

    def test_deeply_nested_noise_keeps_socket_open(self):
        with TestClient(app) as client:
            base = relay.connection_count
            with client.websocket_connect("/ws") as ws1, client.websocket_connect("/ws") as ws2:
                _wait_for_clients(base + 2)
                ws1.send_text("[" * 100000)
                ws1.send_json({"type": "new_post"})
                self.assertEqual(ws2.receive_json(), {"type": "new_post"})
                self.assertEqual(ws1.receive_json(), {"type": "new_post"})

    def test_closed_client_is_removed(self):
        with TestClient(app) as client:
            base = relay.connection_count
            with client.websocket_connect("/ws") as ws1:
                with client.websocket_connect("/ws"):
                    _wait_for_clients(base + 2)
                deadline = time.time() + 2.0
                while relay.connection_count > base + 1 and time.time() < deadline:
                    time.sleep(0.01)
                self.assertEqual(relay.connection_count, base + 1)
                ws1.send_json({"type": "approval_update"})
                self.assertEqual(ws1.receive_json(), {"type": "approval_update"})


if __name__ == "__main__":
    unittest.main()
