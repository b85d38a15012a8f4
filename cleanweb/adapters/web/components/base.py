# cleanweb/adapters/web/components/base.py
from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Pattern,
    Tuple,
    Type,
)

from starlette.convertors import Convertor
from starlette.routing import compile_path

from cleanweb.adapters.web.antiforgery import AntiforgeryTokens
from cleanweb.adapters.web.errors import (
    ComponentRegistrationError,
    UnknownEventError,
)


class RenderMode(str, Enum):
    """How a page is delivered to the browser."""
    STATIC = "static"   # Plain server-side HTML, no persistent connection
    SERVER = "server"   # Prerendered, then kept live over a WebSocket circuit


@dataclass
class ComponentContext:
    """Everything a component may read about the request that created it."""

    path: str
    services: Any
    settings: Any
    query: Mapping[str, str] = field(default_factory=dict)
    antiforgery: Optional[AntiforgeryTokens] = None
    request_id: Optional[str] = None
    error: Optional[Any] = None
    interactive: bool = False


def event_handler(name: Optional[str] = None) -> Callable:
    """
    Marks a component method as the handler for a client event.

        @event_handler("increment")
        async def increment(self, args): ...
    """
    def decorator(fn: Callable) -> Callable:
        fn.__event_name__ = name or fn.__name__
        return fn
    return decorator


class Component:
    """
    Base class for routable UI components.

    Subclasses set ``route`` and implement ``render``. Pages that handle
    form posts set ``accepts_submit`` and override ``on_submit``. ``inject``
    maps attribute names to providers on the DI container; they are
    resolved when the component is created.
    """

    route: ClassVar[Optional[str]] = None
    title: ClassVar[str] = "cleanweb"
    render_mode: ClassVar[Optional[RenderMode]] = None
    inject: ClassVar[Mapping[str, str]] = {}
    accepts_submit: ClassVar[bool] = False

    _event_handlers: ClassVar[Dict[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        handlers: Dict[str, str] = {}
        for klass in reversed(cls.__mro__):
            for attr, value in vars(klass).items():
                event = getattr(value, "__event_name__", None)
                if event:
                    handlers[event] = attr
        cls._event_handlers = handlers

    def __init__(self, context: ComponentContext, params: Optional[Mapping[str, Any]] = None):
        self.context = context
        self.params: Dict[str, Any] = dict(params or {})
        self.status_code = 200
        for attr, provider_name in self.inject.items():
            setattr(self, attr, getattr(context.services, provider_name)())

    @classmethod
    def events(cls) -> List[str]:
        return sorted(cls._event_handlers)

    async def on_initialized(self) -> None:
        """Called once after creation, before the first render."""

    async def on_submit(self, form: Mapping[str, str]) -> Optional[str]:
        """
        Handles a form POST; only called when ``accepts_submit`` is set.
        Return a path to redirect to (303), or None to render the page again.
        """

    async def handle_event(self, name: str, args: Mapping[str, Any]) -> None:
        attr = self._event_handlers.get(name)
        if attr is None:
            raise UnknownEventError(type(self).__name__, name)
        result = getattr(self, attr)(dict(args))
        if inspect.isawaitable(result):
            await result

    def render(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class _RouteEntry:
    template: str
    regex: Pattern[str]
    convertors: Dict[str, Convertor]
    component: Type[Component]


class ComponentRegistry:
    """
    Maps URL paths to component classes.

    Routes use Starlette path templates (``/products/{product_id:int}``) and
    are matched case-insensitively in registration order.
    """

    def __init__(self, components: Tuple[Type[Component], ...] = (), not_found: Optional[Type[Component]] = None):
        self._routes: List[_RouteEntry] = []
        self._by_key: Dict[str, Type[Component]] = {}
        self.not_found = not_found
        for component in components:
            self.register(component)
        if not_found is not None:
            self._by_key[self.key_for(not_found)] = not_found

    @staticmethod
    def key_for(component: Type[Component]) -> str:
        return f"{component.__module__}.{component.__qualname__}"

    def register(self, component: Type[Component]) -> Type[Component]:
        if not component.route or not component.route.startswith("/"):
            raise ComponentRegistrationError(
                f"Component '{component.__name__}' needs a route starting with '/'"
            )
        for entry in self._routes:
            if entry.template.lower() == component.route.lower():
                raise ComponentRegistrationError(
                    f"Route '{component.route}' is already mapped to '{entry.component.__name__}'"
                )

        regex, _, convertors = compile_path(component.route)
        self._routes.append(_RouteEntry(
            template=component.route,
            regex=re.compile(regex.pattern, re.IGNORECASE),
            convertors=convertors,
            component=component,
        ))
        self._by_key[self.key_for(component)] = component
        return component

    def match(self, path: str) -> Optional[Tuple[Type[Component], Dict[str, Any]]]:
        for entry in self._routes:
            found = entry.regex.match(path)
            if found:
                params = {
                    name: entry.convertors[name].convert(value)
                    for name, value in found.groupdict().items()
                }
                return entry.component, params
        return None

    def resolve(self, key: str) -> Optional[Type[Component]]:
        return self._by_key.get(key)

    def __iter__(self) -> Iterator[Type[Component]]:
        return (entry.component for entry in self._routes)

    def __len__(self) -> int:
        return len(self._routes)
