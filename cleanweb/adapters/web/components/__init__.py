# cleanweb/adapters/web/components/__init__.py
"""
Server-interactive component rendering.

Pages are plain Python classes rendered to HTML on the server. In
``RenderMode.SERVER`` the prerendered page opens a WebSocket circuit; the
component instance then lives on the server, client events are sent over
the socket and re-rendered markup is streamed back.
"""

from cleanweb.adapters.web.components.base import (
    Component,
    ComponentContext,
    ComponentRegistry,
    RenderMode,
    event_handler,
)
from cleanweb.adapters.web.components.circuit import Circuit, CircuitRegistry
from cleanweb.adapters.web.components.endpoints import ComponentEndpoints
from cleanweb.adapters.web.components.rendering import ComponentRenderer

__all__ = [
    "Circuit",
    "CircuitRegistry",
    "Component",
    "ComponentContext",
    "ComponentEndpoints",
    "ComponentRegistry",
    "ComponentRenderer",
    "RenderMode",
    "event_handler",
]
