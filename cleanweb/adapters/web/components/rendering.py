# cleanweb/adapters/web/components/rendering.py
from __future__ import annotations

from html import escape
from typing import Any, Dict, Mapping, Optional, Tuple, Type

import structlog
from itsdangerous import BadData, URLSafeSerializer
from starlette.requests import HTTPConnection

from cleanweb.adapters.web.antiforgery import AntiforgeryTokens
from cleanweb.adapters.web.components.base import (
    Component,
    ComponentContext,
    ComponentRegistry,
    RenderMode,
)
from cleanweb.adapters.web.components.circuit import CLOSE_POLICY_VIOLATION
from cleanweb.adapters.web.errors import CircuitError, ComponentRenderError
from cleanweb.shared.config import Settings

logger = structlog.get_logger()

CLIENT_SCRIPT = "_framework/interactive.js"

NAV_LINKS = (
    ("/", "Home"),
    ("/counter", "Counter"),
    ("/products", "Products"),
)


def render_layout(title: str, body: str, *, root_attrs: str = "", scripts: str = "", app_name: str = "cleanweb") -> str:
    nav = "".join(
        f'<li><a href="{escape(href)}">{escape(label)}</a></li>' for href, label in NAV_LINKS
    )
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8" />\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0" />\n'
        '<base href="/" />\n'
        f"<title>{escape(title)}</title>\n"
        '<link rel="stylesheet" href="app.css" />\n'
        "</head>\n"
        "<body>\n"
        '<div class="page">\n'
        f'<nav class="sidebar"><a class="brand" href="/">{escape(app_name)}</a><ul>{nav}</ul></nav>\n'
        f'<main><div id="app"{root_attrs}>{body}</div></main>\n'
        "</div>\n"
        f"{scripts}"
        "</body>\n"
        "</html>\n"
    )


class ComponentRenderer:
    """
    Creates components for a request and renders them as full documents.

    Pages in server-interactive mode are prerendered and carry a signed
    descriptor; the client script opens a circuit with it and the
    component is recreated server-side from the descriptor.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        services: Any,
        settings: Settings,
        render_mode: RenderMode = RenderMode.SERVER,
    ):
        self.registry = registry
        self.services = services
        self.settings = settings
        self.render_mode = render_mode
        self._descriptors = URLSafeSerializer(settings.SECRET_KEY, salt="cleanweb.circuit")

    # --- Modes ---

    def effective_mode(self, component: Type[Component]) -> RenderMode:
        mode = component.render_mode or self.render_mode
        if mode == RenderMode.SERVER and self.render_mode != RenderMode.SERVER:
            raise ComponentRenderError(
                f"Component '{component.__name__}' requires server interactivity, "
                "which is not enabled on this endpoint"
            )
        return mode

    # --- Creation ---

    def context_for(self, connection: HTTPConnection, **overrides: Any) -> ComponentContext:
        state = connection.scope.get("state", {})
        values: Dict[str, Any] = dict(
            path=connection.url.path,
            services=self.services,
            settings=self.settings,
            query=dict(connection.query_params),
            antiforgery=state.get("antiforgery"),
            request_id=state.get("request_id"),
            error=state.get("exception_handler"),
        )
        values.update(overrides)
        return ComponentContext(**values)

    def resolve(self, path: str) -> Tuple[Type[Component], Dict[str, Any]]:
        found = self.registry.match(path)
        if found is not None:
            return found
        if self.registry.not_found is None:
            raise ComponentRenderError(f"No component matches '{path}' and no fallback is registered")
        return self.registry.not_found, {}

    async def create(self, component: Type[Component], params: Mapping[str, Any], context: ComponentContext) -> Component:
        instance = component(context, params)
        await instance.on_initialized()
        return instance

    # --- Descriptors ---

    def protect(self, component: Component) -> str:
        context = component.context
        payload: Dict[str, Any] = {
            "component": self.registry.key_for(type(component)),
            "path": context.path,
            "query": dict(context.query),
        }
        if context.antiforgery is not None:
            payload["antiforgery"] = {
                "form_field": context.antiforgery.form_field,
                "header_name": context.antiforgery.header_name,
                "request_token": context.antiforgery.request_token,
            }
        return self._descriptors.dumps(payload)

    def unprotect(self, descriptor: Optional[str]) -> Dict[str, Any]:
        if not descriptor:
            raise CircuitError("Missing component descriptor", CLOSE_POLICY_VIOLATION)
        try:
            payload = self._descriptors.loads(descriptor)
        except BadData as exc:
            raise CircuitError("Invalid component descriptor", CLOSE_POLICY_VIOLATION) from exc
        if not isinstance(payload, dict):
            raise CircuitError("Invalid component descriptor", CLOSE_POLICY_VIOLATION)
        return payload

    async def restore(self, descriptor: Optional[str], connection: HTTPConnection) -> Component:
        """Recreates the component named by a descriptor for a new circuit."""
        payload = self.unprotect(descriptor)

        component = self.registry.resolve(payload.get("component", ""))
        if component is None or self.effective_mode(component) != RenderMode.SERVER:
            raise CircuitError("Descriptor does not name an interactive component", CLOSE_POLICY_VIOLATION)

        path = payload.get("path", "/")
        found = self.registry.match(path)
        params = found[1] if found is not None and found[0] is component else {}

        tokens = None
        if payload.get("antiforgery"):
            data = payload["antiforgery"]
            tokens = AntiforgeryTokens(
                cookie_token="",
                request_token=data["request_token"],
                form_field=data["form_field"],
                header_name=data["header_name"],
            )

        context = self.context_for(
            connection,
            path=path,
            query=payload.get("query") or {},
            antiforgery=tokens,
            interactive=True,
        )
        logger.debug("component_restored", component=component.__name__, path=path)
        return await self.create(component, params, context)

    # --- Documents ---

    def render_document(self, component: Component) -> str:
        mode = self.effective_mode(type(component))
        body = component.render()
        title = component.title

        if mode != RenderMode.SERVER:
            return render_layout(title, body, app_name=self.settings.APP_NAME)

        root_attrs = (
            f' data-render-mode="{RenderMode.SERVER.value}"'
            f' data-descriptor="{escape(self.protect(component))}"'
        )
        scripts = (
            f'<script src="{CLIENT_SCRIPT}"'
            f' data-endpoint="{escape(self.settings.INTERACTIVE_ENDPOINT)}"></script>\n'
        )
        return render_layout(title, body, root_attrs=root_attrs, scripts=scripts, app_name=self.settings.APP_NAME)
