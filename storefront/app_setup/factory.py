"""
Factory d’application recommandée pour les entrypoints (ex: storefront.asgi).
Ordonne les étapes d’initialisation de manière lisible et testable.
"""
import os
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_cors_middleware
from .exception_handlers import register_exception_handlers
from .routers import register_routers
from storefront.logging_config import setup_logging

def create_app() -> FastAPI:
    """
    Construit l’app FastAPI avec le lifespan et enregistre:
      - la configuration des logs (LOG_LEVEL)
      - le middleware CORS de l'endpoint de checkout
      - le gestionnaire des erreurs métier
      - tous les routers (API, webhook, health)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    app = FastAPI(title="Storefront Checkout", lifespan=lifespan)
    app.state.seen_transactions = None
    register_cors_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
