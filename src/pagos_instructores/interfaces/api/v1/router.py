"""Router principal v1."""
from fastapi import APIRouter

from pagos_instructores.interfaces.api.v1.endpoints import categorias, formulas, health, pagos

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(pagos.router)
api_router.include_router(formulas.router)
api_router.include_router(categorias.router)
