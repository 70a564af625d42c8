"""ASGI entry point: ``uvicorn storefront.infrastructure.api.main:app``."""

from storefront.infrastructure.api.app import create_app

app = create_app()
