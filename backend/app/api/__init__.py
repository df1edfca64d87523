"""
API Routes
Progetto: Invoice Manager (Gestionale Fatture)

Modulo per l'aggregazione dei router.
"""

from app.api.v1 import api_router

# Esportazione router
__all__ = ["api_router"]
