"""ASGI application and lifespan wiring."""
