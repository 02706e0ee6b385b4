"""
API Routes
Progetto: Bengkel Manager (Gestionale Officina)

Modulo per l'aggregazione dei router versionati.
"""

from bengkel.api.v1 import api_v1_router

# Esportazione router
__all__ = ["api_v1_router"]
