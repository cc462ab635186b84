"""Schemas de la API v1."""
from pagos_instructores.interfaces.api.v1.schemas.requests import (
    CategoriaManualRequest,
    DuplicarFormulasRequest,
    RecalcularPagoRequest,
    RecalcularPeriodoRequest,
)
from pagos_instructores.interfaces.api.v1.schemas.responses import (
    AsignacionCategoriaResponse,
    DuplicarFormulasResponse,
    HealthResponse,
    PagoResponse,
    RecalcularPagoResponse,
    RecalcularPeriodoResponse,
    ResultadoInstructorResponse,
)

__all__ = [
    "CategoriaManualRequest",
    "DuplicarFormulasRequest",
    "RecalcularPagoRequest",
    "RecalcularPeriodoRequest",
    "AsignacionCategoriaResponse",
    "DuplicarFormulasResponse",
    "HealthResponse",
    "PagoResponse",
    "RecalcularPagoResponse",
    "RecalcularPeriodoResponse",
    "ResultadoInstructorResponse",
]
