# tests/adapters/test_circuits.py
"""
Interactive circuits over the WebSocket endpoint.
"""
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from cleanweb.adapters.web.components.base import Component, ComponentContext, event_handler
from cleanweb.adapters.web.components.circuit import Circuit, CircuitRegistry
from cleanweb.adapters.web.components.pages import DEFAULT_PAGES
from cleanweb.adapters.web.errors import CircuitError
from cleanweb.adapters.web.main import create_app
from tests.conftest import HTTPS_BASE, build_app, extract_descriptor, make_settings

WS_URL = "wss://testserver/_interactive"


def _start(ws, descriptor):
    ws.send_json({"type": "start", "descriptor": descriptor})
    started = ws.receive_json()
    first = ws.receive_json()
    assert started["type"] == "started"
    return started, first


class Faulty(Component):
    route = "/faulty"

    @event_handler("explode")
    def explode(self, args):
        raise ValueError("handler failed")

    def render(self):
        return "<p>faulty</p>"


class Fragile(Component):
    """Renders fine until the 'break' event flips it."""
    route = "/fragile"

    def __init__(self, context, params=None):
        super().__init__(context, params)
        self.broken = False

    @event_handler("break")
    def break_it(self, args):
        self.broken = True

    def render(self):
        if self.broken:
            raise RuntimeError("render failed")
        return "<p>fragile</p>"


class TestCircuitUnit:
    @pytest.fixture
    def sent(self):
        return []

    @pytest.fixture
    def circuit(self, sent):
        async def send(message):
            sent.append(message)
        return Circuit(Faulty(ComponentContext(path="/faulty", services=None, settings=None)), send, "c1")

    @pytest.mark.asyncio
    async def test_start_announces_and_renders(self, circuit, sent):
        await circuit.start()
        assert sent == [
            {"type": "started", "circuit": "c1"},
            {"type": "render", "batch": 1, "html": "<p>faulty</p>"},
        ]

    @pytest.mark.asyncio
    async def test_unchanged_render_is_acknowledged(self, circuit, sent):
        await circuit.render()
        await circuit.render()
        assert sent[-1] == {"type": "ack", "batch": 2}

    @pytest.mark.asyncio
    async def test_handler_failure_is_internal_error(self, circuit):
        with pytest.raises(CircuitError) as excinfo:
            await circuit.dispatch({"type": "event", "event": "explode"})
        assert excinfo.value.close_code == 1011

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", [
        {"type": "resize"},
        {"type": "event"},
        {"type": "event", "event": "explode", "args": ["not", "a", "dict"]},
    ])
    async def test_malformed_messages_are_unsupported_data(self, circuit, message):
        with pytest.raises(CircuitError) as excinfo:
            await circuit.dispatch(message)
        assert excinfo.value.close_code == 1003

    @pytest.mark.asyncio
    async def test_render_failure_after_event_is_internal_error(self, sent):
        async def send(message):
            sent.append(message)

        circuit = Circuit(Fragile(ComponentContext(path="/fragile", services=None, settings=None)), send)
        await circuit.start()

        with pytest.raises(CircuitError) as excinfo:
            await circuit.dispatch({"type": "event", "event": "break"})

        assert excinfo.value.close_code == 1011
        assert sent[-1]["type"] == "render"

    def test_registry_limits_active_circuits(self):
        registry = CircuitRegistry(max_active=1)
        component = Faulty(ComponentContext(path="/faulty", services=None, settings=None))

        async def send(message):
            pass

        first = registry.open(component, send)
        with pytest.raises(CircuitError) as excinfo:
            registry.open(component, send)
        assert excinfo.value.close_code == 1013

        registry.close(first.id)
        assert registry.active == 0
        registry.open(component, send)
        assert registry.close_all() == 1


class TestInteractiveEndpoint:
    def test_counter_increments(self, client):
        descriptor = extract_descriptor(client.get("/counter").text)
        with client.websocket_connect(WS_URL) as ws:
            _, first = _start(ws, descriptor)
            assert "Current count: 0" in first["html"]

            ws.send_json({"type": "event", "event": "increment"})
            assert "Current count: 1" in ws.receive_json()["html"]

            ws.send_json({"type": "event", "event": "increment", "args": {"by": 5}})
            update = ws.receive_json()
        assert update["type"] == "render"
        assert update["batch"] == 3
        assert "Current count: 6" in update["html"]

    def test_each_circuit_has_its_own_state(self, client):
        descriptor = extract_descriptor(client.get("/counter").text)
        with client.websocket_connect(WS_URL) as ws:
            _start(ws, descriptor)
            ws.send_json({"type": "event", "event": "increment"})
            ws.receive_json()
        with client.websocket_connect(WS_URL) as ws:
            _, first = _start(ws, descriptor)
        assert "Current count: 0" in first["html"]

    def test_unchanged_render_sends_ack(self, client):
        descriptor = extract_descriptor(client.get("/products").text)
        with client.websocket_connect(WS_URL) as ws:
            _start(ws, descriptor)
            ws.send_json({"type": "event", "event": "refresh"})
            assert ws.receive_json() == {"type": "ack", "batch": 2}

    def test_ping(self, client):
        descriptor = extract_descriptor(client.get("/").text)
        with client.websocket_connect(WS_URL) as ws:
            _start(ws, descriptor)
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_circuit_is_tracked_while_connected(self, production_app, client):
        circuits = production_app.state.container.circuit_registry()
        descriptor = extract_descriptor(client.get("/").text)
        assert circuits.active == 0
        with client.websocket_connect(WS_URL) as ws:
            started, _ = _start(ws, descriptor)
            assert circuits.active == 1
            assert circuits.get(started["circuit"]) is not None

    def test_unknown_event_closes_circuit(self, client):
        descriptor = extract_descriptor(client.get("/counter").text)
        with client.websocket_connect(WS_URL) as ws:
            _start(ws, descriptor)
            ws.send_json({"type": "event", "event": "decrement"})
            error = ws.receive_json()
            with pytest.raises(WebSocketDisconnect) as excinfo:
                ws.receive_json()
        assert error["type"] == "error"
        assert "decrement" in error["message"]
        assert excinfo.value.code == 1003

    def test_forged_descriptor_is_rejected(self, client):
        with client.websocket_connect(WS_URL) as ws:
            ws.send_json({"type": "start", "descriptor": "forged.descriptor"})
            assert ws.receive_json()["type"] == "error"
            with pytest.raises(WebSocketDisconnect) as excinfo:
                ws.receive_json()
        assert excinfo.value.code == 1008

    def test_first_message_must_be_start(self, client):
        with client.websocket_connect(WS_URL) as ws:
            ws.send_json({"type": "event", "event": "increment"})
            assert ws.receive_json()["message"] == "The first message must be 'start'"
            with pytest.raises(WebSocketDisconnect) as excinfo:
                ws.receive_json()
        assert excinfo.value.code == 1008

    def test_non_json_message_is_rejected(self, client):
        with client.websocket_connect(WS_URL) as ws:
            ws.send_text("hello")
            assert ws.receive_json()["type"] == "error"
            with pytest.raises(WebSocketDisconnect) as excinfo:
                ws.receive_json()
        assert excinfo.value.code == 1003

    def test_binary_frame_is_rejected(self, client):
        descriptor = extract_descriptor(client.get("/counter").text)
        with client.websocket_connect(WS_URL) as ws:
            _start(ws, descriptor)
            ws.send_bytes(b"\x00\x01")
            error = ws.receive_json()
            with pytest.raises(WebSocketDisconnect) as excinfo:
                ws.receive_json()
        assert error == {"type": "error", "message": "Messages must be text frames"}
        assert excinfo.value.code == 1003

    def test_circuit_limit(self):
        app = build_app(CIRCUIT_MAX_ACTIVE=1)
        with TestClient(app, base_url=HTTPS_BASE) as c:
            descriptor = extract_descriptor(c.get("/").text)
            with c.websocket_connect(WS_URL) as first:
                _start(first, descriptor)
                with c.websocket_connect(WS_URL) as second:
                    second.send_json({"type": "start", "descriptor": descriptor})
                    assert second.receive_json()["message"] == "Too many active circuits"
                    with pytest.raises(WebSocketDisconnect) as excinfo:
                        second.receive_json()
        assert excinfo.value.code == 1013

    def test_render_failure_sends_error_before_close(self):
        app = create_app(make_settings(), pages=DEFAULT_PAGES + (Fragile,))
        with TestClient(app, base_url=HTTPS_BASE) as c:
            descriptor = extract_descriptor(c.get("/fragile").text)
            with c.websocket_connect(WS_URL) as ws:
                _start(ws, descriptor)
                ws.send_json({"type": "event", "event": "break"})
                error = ws.receive_json()
                with pytest.raises(WebSocketDisconnect) as excinfo:
                    ws.receive_json()
        assert error == {"type": "error", "message": "Unhandled exception in circuit"}
        assert excinfo.value.code == 1011
