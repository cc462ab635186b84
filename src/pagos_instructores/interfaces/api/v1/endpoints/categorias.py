"""Endpoints de categorías de instructor."""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.application.use_cases.gestionar_categorias import (
    AsignarCategoriaManual,
    LimpiarCategoriaManual,
    ObtenerCategoria,
)
from pagos_instructores.domain.entities.asignacion_categoria import AsignacionCategoria
from pagos_instructores.domain.exceptions import ErrorValidacion
from pagos_instructores.infrastructure.cache.redis_cache import redis_cache
from pagos_instructores.infrastructure.database.connection import get_db_session
from pagos_instructores.infrastructure.database.repositories.catalogo_repository_impl import (
    CatalogoRepositoryImpl,
)
from pagos_instructores.infrastructure.database.repositories.pago_repository_impl import (
    PagoRepositoryImpl,
)
from pagos_instructores.interfaces.api.v1.deps import (
    CAPACIDAD_ADMIN,
    obtener_tenant,
    requiere_capacidad,
)
from pagos_instructores.interfaces.api.v1.schemas import (
    AsignacionCategoriaResponse,
    CategoriaManualRequest,
)

router = APIRouter(
    prefix="/categorias",
    tags=["Categorías"],
    dependencies=[Depends(requiere_capacidad(CAPACIDAD_ADMIN))],
)


def _cache_key(tenant_id: str, instructor_id: int, periodo_id: int) -> str:
    return f"categorias:{tenant_id}:{instructor_id}:{periodo_id}"


def _a_response(asignacion: AsignacionCategoria) -> AsignacionCategoriaResponse:
    return AsignacionCategoriaResponse(
        instructor_id=asignacion.instructor_id,
        periodo_id=asignacion.periodo_id,
        disciplina_id=asignacion.disciplina_id,
        categoria=asignacion.categoria.value,
        etiqueta=asignacion.categoria.etiqueta,
        manual=asignacion.manual,
        asignado_por=asignacion.asignado_por,
        motivo=asignacion.motivo(),
        metricas=asignacion.metricas.como_dict() if asignacion.metricas else None,
        criterios=[c.como_dict() for c in asignacion.criterios],
        evaluaciones=[e.como_dict() for e in asignacion.evaluaciones],
    )


@router.get("/{instructor_id}/{periodo_id}", response_model=list[AsignacionCategoriaResponse])
async def obtener_categorias(
    instructor_id: int = Path(..., gt=0),
    periodo_id: int = Path(..., gt=0),
    disciplina_id: int | None = Query(None, description="Filtrar por disciplina"),
    session: AsyncSession = Depends(get_db_session),
    tenant_id: str = Depends(obtener_tenant),
):
    """Asignaciones de categoría del instructor en el período."""
    cache_key = _cache_key(tenant_id, instructor_id, periodo_id)
    cached = await redis_cache.get(cache_key)
    if cached is None:
        asignaciones = await ObtenerCategoria(PagoRepositoryImpl(session, tenant_id)).execute(
            instructor_id, periodo_id
        )
        cached = [_a_response(a).model_dump(mode="json") for a in asignaciones]
        await redis_cache.set(cache_key, cached)

    if disciplina_id is not None:
        cached = [a for a in cached if a["disciplina_id"] == disciplina_id]
    return cached


@router.put("/manual", response_model=AsignacionCategoriaResponse)
async def asignar_categoria_manual(
    request: CategoriaManualRequest,
    session: AsyncSession = Depends(get_db_session),
    tenant_id: str = Depends(obtener_tenant),
):
    """Fija una categoría manual; se respeta en cada recálculo."""
    use_case = AsignarCategoriaManual(
        CatalogoRepositoryImpl(session, tenant_id),
        PagoRepositoryImpl(session, tenant_id),
    )
    try:
        asignacion = await use_case.execute(
            request.instructor_id,
            request.periodo_id,
            request.disciplina_id,
            request.categoria,
            request.asignado_por,
        )
    except ErrorValidacion as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    await redis_cache.delete(_cache_key(tenant_id, request.instructor_id, request.periodo_id))
    return _a_response(asignacion)


@router.delete("/manual")
async def limpiar_categoria_manual(
    instructor_id: int = Query(..., gt=0),
    periodo_id: int = Query(..., gt=0),
    disciplina_id: int = Query(..., gt=0),
    session: AsyncSession = Depends(get_db_session),
    tenant_id: str = Depends(obtener_tenant),
):
    """Elimina la categoría manual; el próximo recálculo la evalúa de nuevo."""
    eliminada = await LimpiarCategoriaManual(PagoRepositoryImpl(session, tenant_id)).execute(
        instructor_id, periodo_id, disciplina_id
    )
    if not eliminada:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No existe una categoría manual para esa clave",
        )

    await redis_cache.delete(_cache_key(tenant_id, instructor_id, periodo_id))
    return {"message": "Categoría manual eliminada", "deleted": True}
