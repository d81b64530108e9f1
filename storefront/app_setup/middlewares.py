"""
Middlewares transverses de l’application.
- register_cors_middleware: CORS limité à l'endpoint de création de commande,
  préflight OPTIONS => 204 (le webhook Mollie n'a pas de CORS et renvoie 405 hors POST).
"""
from typing import Callable, Iterable

from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.status import HTTP_204_NO_CONTENT

from storefront.config import Settings, get_settings

CORS_PATHS = {"/api/create-order"}
CORS_ALLOW_METHODS = "POST,OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization"
CORS_MAX_AGE = "86400"

def _apply_cors_headers(response: Response, origin: str, allowed_origins: Iterable[str]) -> None:
    if origin and origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
    response.headers["Vary"] = "Origin"
    response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    response.headers["Access-Control-Max-Age"] = CORS_MAX_AGE

def register_cors_middleware(app: FastAPI, settings_provider: Callable[[], Settings] = get_settings) -> None:
    """
    En-têtes CORS sur CORS_PATHS:
    - Access-Control-Allow-Origin renvoyé seulement pour les origines autorisées
    - OPTIONS: réponse 204 immédiate (préflight)
    - Les surcharges de get_settings (tests) sont respectées via app.dependency_overrides
    """
    @app.middleware("http")
    async def cors_for_checkout(request: Request, call_next):
        path = request.url.path.rstrip("/")
        if path not in CORS_PATHS:
            return await call_next(request)

        provider = app.dependency_overrides.get(settings_provider, settings_provider)
        allowed = provider().cors_allowed_origins
        origin = request.headers.get("origin") or ""

        if request.method.upper() == "OPTIONS":
            response = Response(status_code=HTTP_204_NO_CONTENT)
        else:
            response = await call_next(request)
        _apply_cors_headers(response, origin, allowed)
        return response
