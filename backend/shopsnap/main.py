"""
shopsnap API - FastAPI Main Entry

Snap a photo of a product, get it on Amazon.

✅ LOCAL:
    cd backend
    python -m uvicorn shopsnap.main:app --reload --host 0.0.0.0 --port 8000

✅ TEST:
    curl -i http://127.0.0.1:8000/health
    curl -i -F "image=@soda.jpg" http://127.0.0.1:8000/api/find
    curl -i -F "image=@soda.jpg" http://127.0.0.1:8000/api/find/products
    curl -i -F "image=@soda.jpg" http://127.0.0.1:8000/api/find/redirect

✅ PRODUCTION:
    Build Command:
        pip install .

    Start Command:
        python -m uvicorn shopsnap.main:app --app-dir backend --host 0.0.0.0 --port $PORT

    Env:
        GEMINI_API_KEY (required), GEMINI_MODEL, LOG_LEVEL
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shopsnap.core.config import Settings, settings as default_settings
from shopsnap.core.errors import ProductLookupError
from shopsnap.core.logging_config import configure_logging

# ✅ Routers
from shopsnap.api.routes_identify import router as find_router


async def product_lookup_error_handler(request: Request, exc: ProductLookupError) -> JSONResponse:
    # Same JSON error shape for every find route, redirect included
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def create_app(settings: Settings = default_settings) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="shopsnap API",
        version=settings.APP_VERSION,
        description="Photo -> Amazon product lookup, backed by Gemini",
    )

    # ✅ CORS
    # Browser / PWA clients post the photo cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ProductLookupError, product_lookup_error_handler)

    # ✅ Root (GET /)
    @app.get("/")
    def root():
        return {
            "name": "shopsnap API",
            "status": "ok",
            "docs": "/docs",
            "health": "/health",
            "version": "/version",
        }

    # ✅ Health Check (GET /health)
    @app.get("/health")
    def health():
        return {"ok": True}

    # ✅ Version endpoint (GET /version)
    @app.get("/version")
    def version():
        return {"version": settings.APP_VERSION, "build": settings.BUILD_ID}

    # ✅ Mount routers
    app.include_router(find_router)

    return app


app = create_app()
