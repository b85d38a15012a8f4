# cleanweb/adapters/web/components/circuit.py
from __future__ import annotations

import uuid
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import structlog

from cleanweb.adapters.web.components.base import Component
from cleanweb.adapters.web.errors import CircuitError, UnknownEventError

logger = structlog.get_logger()

SendJson = Callable[[Any], Awaitable[None]]

# WebSocket close codes (RFC 6455)
CLOSE_POLICY_VIOLATION = 1008
CLOSE_UNSUPPORTED_DATA = 1003
CLOSE_INTERNAL_ERROR = 1011
CLOSE_TRY_AGAIN_LATER = 1013


class Circuit:
    """
    Server-side session of one interactive component.

    The component instance and its state live here for as long as the
    WebSocket stays open. Events are processed one at a time, in the order
    they arrive; after each one the component is rendered again and the new
    markup is pushed only when it changed.
    """

    def __init__(self, component: Component, send_json: SendJson, circuit_id: Optional[str] = None):
        self.id = circuit_id or uuid.uuid4().hex
        self.component = component
        self._send_json = send_json
        self._last_html: Optional[str] = None
        self.batch = 0

    async def start(self) -> None:
        await self._send_json({"type": "started", "circuit": self.id})
        await self.render()

    async def dispatch(self, message: Mapping[str, Any]) -> None:
        kind = message.get("type")

        if kind == "ping":
            await self._send_json({"type": "pong"})
            return

        if kind != "event":
            raise CircuitError(f"Unsupported message type '{kind}'", CLOSE_UNSUPPORTED_DATA)

        event = message.get("event")
        args = message.get("args") or {}
        if not isinstance(event, str) or not isinstance(args, dict):
            raise CircuitError("Malformed event message", CLOSE_UNSUPPORTED_DATA)

        try:
            await self.component.handle_event(event, args)
        except UnknownEventError as exc:
            raise CircuitError(exc.message, CLOSE_UNSUPPORTED_DATA) from exc
        except Exception as exc:
            logger.error("circuit_handler_failed", circuit=self.id, event_name=event, exc_info=True)
            raise CircuitError("Unhandled exception in circuit", CLOSE_INTERNAL_ERROR) from exc

        await self.render()

    async def render(self) -> None:
        self.batch += 1
        try:
            html = self.component.render()
        except Exception as exc:
            logger.error("circuit_render_failed", circuit=self.id, batch=self.batch, exc_info=True)
            raise CircuitError("Unhandled exception in circuit", CLOSE_INTERNAL_ERROR) from exc
        if html == self._last_html:
            await self._send_json({"type": "ack", "batch": self.batch})
            return
        self._last_html = html
        await self._send_json({"type": "render", "batch": self.batch, "html": html})


class CircuitRegistry:
    """Tracks the circuits that are currently connected."""

    def __init__(self, max_active: int = 500):
        self.max_active = max_active
        self._circuits: Dict[str, Circuit] = {}

    @property
    def active(self) -> int:
        return len(self._circuits)

    def open(self, component: Component, send_json: SendJson) -> Circuit:
        if len(self._circuits) >= self.max_active:
            raise CircuitError("Too many active circuits", CLOSE_TRY_AGAIN_LATER)
        circuit = Circuit(component, send_json)
        self._circuits[circuit.id] = circuit
        logger.info("circuit_opened", circuit=circuit.id, component=type(component).__name__, active=self.active)
        return circuit

    def get(self, circuit_id: str) -> Optional[Circuit]:
        return self._circuits.get(circuit_id)

    def close(self, circuit_id: str) -> None:
        if self._circuits.pop(circuit_id, None) is not None:
            logger.info("circuit_closed", circuit=circuit_id, active=self.active)

    def close_all(self) -> int:
        count = len(self._circuits)
        self._circuits.clear()
        return count
