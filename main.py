from dishka import AsyncContainer
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from dishka.integrations.fastapi import setup_dishka

from core.container import create_container
from core.exception_handler import (
    validation_exception_handler,
    http_exception_handler,
    starlette_exception_handler,
    custom_exception_handler
)
from core.exceptions import BaseCustomException
from covalent.router import router as covalent_router

VERSION = "0.1.0"


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """
    Build the proxy application.

    Parameters
    ----------
    container : AsyncContainer | None
        Dependency container, the default one when omitted

    Returns
    -------
    FastAPI
        Application instance
    """
    app = FastAPI(
        title="Covalent Proxy Service",
        version=VERSION,
        description="Typed pass-through to the Covalent class A API",
    )

    setup_dishka(container or create_container(), app)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_exception_handler)
    app.add_exception_handler(BaseCustomException, custom_exception_handler)
    app.add_exception_handler(Exception, custom_exception_handler)

    app.include_router(covalent_router)

    @app.get("/")
    async def root():
        """
        Root endpoint.

        Returns
        -------
        dict
            Application information
        """
        return {
            "name": "Covalent Proxy Service",
            "version": VERSION,
            "endpoints": sorted(
                route.path for route in covalent_router.routes
            ),
            "docs": "/docs"
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": VERSION}

    return app


app = create_app()
