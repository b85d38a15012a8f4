# cleanweb/adapters/web/components/endpoints.py
from __future__ import annotations

import json
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from starlette.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from cleanweb.adapters.web.components.circuit import (
    CLOSE_POLICY_VIOLATION,
    CLOSE_UNSUPPORTED_DATA,
    Circuit,
    CircuitRegistry,
)
from cleanweb.adapters.web.components.rendering import ComponentRenderer
from cleanweb.adapters.web.errors import CircuitError

logger = structlog.get_logger()


async def _receive_message(websocket: WebSocket) -> Dict[str, Any]:
    frame = await websocket.receive()
    if frame["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(frame.get("code", 1000), frame.get("reason"))

    text = frame.get("text")
    if text is None:
        raise CircuitError("Messages must be text frames", CLOSE_UNSUPPORTED_DATA)
    try:
        message = json.loads(text)
    except ValueError as exc:
        raise CircuitError("Messages must be JSON", CLOSE_UNSUPPORTED_DATA) from exc
    if not isinstance(message, dict):
        raise CircuitError("Messages must be JSON objects", CLOSE_UNSUPPORTED_DATA)
    return message


class ComponentEndpoints:
    """
    Maps the component tree onto the router: one catch-all page route for
    prerendering and form posts, and one WebSocket route for circuits.
    """

    def __init__(self, renderer: ComponentRenderer, circuits: CircuitRegistry, interactive_endpoint: str = "/_interactive"):
        self.renderer = renderer
        self.circuits = circuits
        self.interactive_endpoint = interactive_endpoint

    def router(self) -> APIRouter:
        router = APIRouter()
        router.add_api_websocket_route(self.interactive_endpoint, self.interactive)
        router.add_api_route(
            "/{path:path}",
            self.page,
            methods=["GET", "POST"],
            include_in_schema=False,
        )
        return router

    async def page(self, request: Request) -> Response:
        component_cls, params = self.renderer.resolve(request.url.path)
        component = await self.renderer.create(component_cls, params, self.renderer.context_for(request))

        if request.method == "POST":
            if not component_cls.accepts_submit:
                return PlainTextResponse("Method Not Allowed", status_code=405, headers={"Allow": "GET"})

            async with request.form() as form:
                fields = {key: value for key, value in form.items() if isinstance(value, str)}
            location = await component.on_submit(fields)
            if location:
                return RedirectResponse(location, status_code=303)

        return HTMLResponse(self.renderer.render_document(component), status_code=component.status_code)

    async def interactive(self, websocket: WebSocket) -> None:
        await websocket.accept()
        circuit: Circuit | None = None
        try:
            start = await _receive_message(websocket)
            if start.get("type") != "start":
                raise CircuitError("The first message must be 'start'", CLOSE_POLICY_VIOLATION)

            component = await self.renderer.restore(start.get("descriptor"), websocket)
            circuit = self.circuits.open(component, websocket.send_json)
            await circuit.start()

            while True:
                await circuit.dispatch(await _receive_message(websocket))

        except WebSocketDisconnect:
            logger.info("circuit_disconnected", circuit=circuit.id if circuit else None)
        except CircuitError as exc:
            logger.warning(
                "circuit_terminated",
                circuit=circuit.id if circuit else None,
                reason=exc.message,
                close_code=exc.close_code,
            )
            await websocket.send_json({"type": "error", "message": exc.message})
            await websocket.close(code=exc.close_code)
        finally:
            if circuit is not None:
                self.circuits.close(circuit.id)
