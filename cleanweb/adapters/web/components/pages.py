# cleanweb/adapters/web/components/pages.py
"""
Routable pages of the application.

Pages render with the endpoint's mode (server-interactive) unless they set
``render_mode``. Error and NotFound stay static: they must work even when
the client cannot open a circuit.
"""

from __future__ import annotations

from html import escape
from typing import List, Mapping, Optional

from cleanweb.adapters.web.components.base import Component, RenderMode, event_handler
from cleanweb.core.domain.exceptions import DomainError, ProductNotFoundError
from cleanweb.core.domain.models import Product


def antiforgery_field(component: Component) -> str:
    tokens = component.context.antiforgery
    if tokens is None:
        return ""
    return (
        f'<input type="hidden" name="{escape(tokens.form_field)}" '
        f'value="{escape(tokens.request_token)}" />'
    )


class Home(Component):
    route = "/"
    title = "Home"

    def render(self) -> str:
        return (
            "<h1>Hello, world!</h1>"
            "<p>Welcome to your new app.</p>"
        )


class Counter(Component):
    route = "/counter"
    title = "Counter"

    def __init__(self, context, params=None):
        super().__init__(context, params)
        self.count = 0

    @event_handler("increment")
    def increment(self, args: Mapping) -> None:
        self.count += int(args.get("by", 1))

    def render(self) -> str:
        return (
            "<h1>Counter</h1>"
            f'<p role="status">Current count: {self.count}</p>'
            '<button class="btn btn-primary" data-on-click="increment">Click me</button>'
        )


class Products(Component):
    route = "/products"
    title = "Products"
    inject = {"products": "product_service"}
    accepts_submit = True

    def __init__(self, context, params=None):
        super().__init__(context, params)
        self.items: List[Product] = []
        self.error: Optional[str] = None

    async def on_initialized(self) -> None:
        self.items = await self.products.list_products()

    @event_handler("refresh")
    async def refresh(self, args: Mapping) -> None:
        self.items = await self.products.list_products()

    async def on_submit(self, form: Mapping[str, str]) -> Optional[str]:
        try:
            await self.products.add_product(form.get("name", ""))
        except DomainError as exc:
            self.error = exc.message
            self.status_code = 400
            return None
        return self.route

    def render(self) -> str:
        rows = "".join(
            f'<tr><td>{product.id}</td><td><a href="/products/{product.id}">{escape(product.name)}</a></td></tr>'
            for product in self.items
        )
        error = f'<p class="validation-message">{escape(self.error)}</p>' if self.error else ""
        return (
            "<h1>Products</h1>"
            '<table class="table"><thead><tr><th>Id</th><th>Name</th></tr></thead>'
            f"<tbody>{rows}</tbody></table>"
            '<button class="btn" data-on-click="refresh">Refresh</button>'
            '<form method="post" action="/products">'
            f"{antiforgery_field(self)}"
            '<label for="name">Name</label> <input id="name" name="name" /> '
            '<button class="btn btn-primary" type="submit">Add</button>'
            "</form>"
            f"{error}"
        )


class ProductDetail(Component):
    route = "/products/{product_id:int}"
    title = "Product"
    inject = {"products": "product_service"}

    def __init__(self, context, params=None):
        super().__init__(context, params)
        self.product: Optional[Product] = None

    async def on_initialized(self) -> None:
        try:
            self.product = await self.products.get_product(self.params["product_id"])
        except ProductNotFoundError:
            self.status_code = 404

    def render(self) -> str:
        if self.product is None:
            return (
                "<h1>Product not found</h1>"
                f'<p>There is no product with id {self.params["product_id"]}.</p>'
                '<a href="/products">Back to products</a>'
            )
        return (
            f"<h1>{escape(self.product.name)}</h1>"
            f"<dl><dt>Id</dt><dd>{self.product.id}</dd></dl>"
            '<a href="/products">Back to products</a>'
        )


class Error(Component):
    route = "/Error"
    title = "Error"
    render_mode = RenderMode.STATIC

    def render(self) -> str:
        request_id = self.context.request_id
        request_id_html = (
            f"<p><strong>Request ID:</strong> <code>{escape(request_id)}</code></p>"
            if request_id else ""
        )
        return (
            '<h1 class="text-danger">Error.</h1>'
            '<h2 class="text-danger">An error occurred while processing your request.</h2>'
            f"{request_id_html}"
            "<h3>Development Mode</h3>"
            "<p>Setting <strong>APP_ENV=development</strong> displays detailed information "
            "about the error that occurred.</p>"
            "<p><strong>The Development environment shouldn't be enabled for deployed applications.</strong></p>"
        )


class NotFound(Component):
    route = None
    title = "Not found"
    render_mode = RenderMode.STATIC

    def __init__(self, context, params=None):
        super().__init__(context, params)
        self.status_code = 404

    def render(self) -> str:
        return (
            "<h1>Not found</h1>"
            f"<p>Sorry, there's nothing at <code>{escape(self.context.path)}</code>.</p>"
        )


DEFAULT_PAGES = (Home, Counter, Products, ProductDetail, Error)
