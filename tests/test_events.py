import asyncio

from utils.events import NEW_REPORT, SocketIOPublisher, create_socket_server


class FakeServer:
    def __init__(self, fail=False):
        self.fail = fail
        self.emitted = []

    async def emit(self, event, data):
        if self.fail:
            raise ConnectionError("transport closed")
        self.emitted.append((event, data))


def test_publisher_broadcasts_on_default_namespace():
    server = FakeServer()
    asyncio.run(SocketIOPublisher(server).publish(NEW_REPORT, {"id": 1}))
    assert server.emitted == [("newReport", {"id": 1})]


def test_failed_emit_is_logged_not_raised(caplog):
    server = FakeServer(fail=True)
    asyncio.run(SocketIOPublisher(server).publish(NEW_REPORT, {"id": 1}))
    assert "Failed to emit newReport" in caplog.text


def test_socket_server_registers_handlers():
    sio = create_socket_server(["http://localhost:5173"])
    handlers = sio.handlers["/"]
    assert "connect" in handlers
    assert "disconnect" in handlers


def test_asgi_entry_point_wraps_fastapi_app():
    import main

    assert main.asgi_app.other_asgi_app is main.app
