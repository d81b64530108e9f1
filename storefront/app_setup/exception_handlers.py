"""
Gestionnaires d’exceptions.
- CheckoutError (et sous-classes) => {"error": ..., "details"?: ...} avec le code HTTP de l'erreur.
- Les autres HTTPException gardent la réponse JSON FastAPI standard ({"detail": ...}).
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.errors import CheckoutError

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre le handler des erreurs métier.
    - Code machine-lisible dans `error` pour le front (ex: "Missing customer fields").
    """
    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
