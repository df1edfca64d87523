"""
API Routes
Progetto: Invoice Manager (Gestionale Fatture)

Router aggregato dell'API REST, esposto sotto il prefisso /api.
"""

from fastapi import APIRouter

from app.api.v1 import auth, clients, health, invoices, users

# Router aggregato
api_router = APIRouter(prefix="/api")

# Includi i router dei moduli
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(clients.router)
api_router.include_router(invoices.router)
api_router.include_router(users.router)

# Esportazione
__all__ = ["api_router"]
