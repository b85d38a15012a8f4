# cleanweb/adapters/web/__init__.py
"""
UI layer: the ASGI application, its request pipeline, the JSON API and the
server-interactive component endpoints.
"""
