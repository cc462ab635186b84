"""Endpoints de configuración de fórmulas."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.application.ports.bloqueo import BloqueoRecalculo
from pagos_instructores.application.use_cases.duplicar_formulas import DuplicarFormulas
from pagos_instructores.domain.exceptions import (
    ErrorConfiguracion,
    ErrorConflicto,
    ErrorValidacion,
)
from pagos_instructores.infrastructure.config.logging import logger
from pagos_instructores.infrastructure.database.connection import get_db_session
from pagos_instructores.infrastructure.database.repositories.catalogo_repository_impl import (
    CatalogoRepositoryImpl,
)
from pagos_instructores.infrastructure.database.repositories.formula_repository_impl import (
    FormulaRepositoryImpl,
)
from pagos_instructores.interfaces.api.v1.deps import (
    CAPACIDAD_ADMIN,
    obtener_bloqueo,
    obtener_tenant,
    requiere_capacidad,
)
from pagos_instructores.interfaces.api.v1.schemas import (
    DuplicarFormulasRequest,
    DuplicarFormulasResponse,
)

router = APIRouter(
    prefix="/formulas",
    tags=["Fórmulas"],
    dependencies=[Depends(requiere_capacidad(CAPACIDAD_ADMIN))],
)


@router.post("/duplicar", response_model=DuplicarFormulasResponse)
async def duplicar_formulas(
    request: DuplicarFormulasRequest,
    session: AsyncSession = Depends(get_db_session),
    tenant_id: str = Depends(obtener_tenant),
    bloqueo: BloqueoRecalculo = Depends(obtener_bloqueo),
):
    """
    Copia las fórmulas y requisitos de un período a otro.
    
    El destino se reemplaza completo; si el origen está vacío no se toca.
    """
    use_case = DuplicarFormulas(
        CatalogoRepositoryImpl(session, tenant_id),
        FormulaRepositoryImpl(session, tenant_id),
        bloqueo,
        tenant_id=tenant_id,
    )

    try:
        resultado = await use_case.execute(request.periodo_origen_id, request.periodo_destino_id)
    except ErrorConflicto as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (ErrorValidacion, ErrorConfiguracion) as e:
        logger.warning(f"Duplicación rechazada: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return DuplicarFormulasResponse(message=resultado.mensaje, count=resultado.copiadas)
