"""
Registre central des routers (API checkout, webhook Mollie, health).
- API: orders_router (/api/create-order)
- Webhooks: webhook_router (/api/mollie-webhook)
- Health: health_router (/health, /health/config)
"""
from fastapi import FastAPI
from storefront.orders.views import router as orders_router
from storefront.reconciliation.views import router as webhook_router
from storefront.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l’application.
    - Les deux endpoints métier partagent le préfixe /api (chemins distincts, pas de conflit).
    """
    # API checkout
    app.include_router(orders_router)
    # Webhooks fournisseurs
    app.include_router(webhook_router)
    # Health & monitoring
    app.include_router(health_router)
