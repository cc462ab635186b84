"""Endpoints de cálculo de pagos."""
from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.application.use_cases.recalcular_pago import (
    OverridesRecalculo,
    RecalcularPago,
)
from pagos_instructores.application.use_cases.recalcular_periodo import RecalcularPeriodo
from pagos_instructores.domain.entities.pago import Pago
from pagos_instructores.domain.exceptions import ErrorValidacion
from pagos_instructores.domain.value_objects.reajuste import Reajuste
from pagos_instructores.infrastructure.cache.redis_cache import redis_cache
from pagos_instructores.infrastructure.database.connection import get_db_session
from pagos_instructores.infrastructure.database.repositories.pago_repository_impl import (
    PagoRepositoryImpl,
)
from pagos_instructores.interfaces.api.v1.deps import (
    CAPACIDAD_ADMIN,
    obtener_recalculo,
    obtener_tenant,
    requiere_capacidad,
)
from pagos_instructores.interfaces.api.v1.schemas import (
    PagoResponse,
    RecalcularPagoRequest,
    RecalcularPagoResponse,
    RecalcularPeriodoRequest,
    RecalcularPeriodoResponse,
    ResultadoInstructorResponse,
)

router = APIRouter(
    prefix="/pagos",
    tags=["Pagos"],
    dependencies=[Depends(requiere_capacidad(CAPACIDAD_ADMIN))],
)


def pago_a_response(pago: Pago) -> PagoResponse:
    return PagoResponse(
        id=pago.id,
        instructor_id=pago.instructor_id,
        periodo_id=pago.periodo_id,
        monto_base=pago.monto_base,
        bonos=pago.bonos,
        penalizaciones=pago.penalizaciones,
        reajuste=pago.reajuste.valor,
        tipo_reajuste=pago.reajuste.tipo.value,
        monto_reajuste=pago.monto_reajuste,
        subtotal_reajustado=pago.subtotal_reajustado,
        retencion=pago.retencion,
        pago_final=pago.pago_final,
        estado=pago.estado.value,
        comentarios=pago.comentarios,
        log_calculo=list(pago.log_calculo),
        detalle_clases=[d.como_dict() for d in pago.detalle_clases],
        detalles=pago.detalles,
        creado_en=pago.creado_en,
        actualizado_en=pago.actualizado_en,
    )


@router.post("/recalcular", response_model=RecalcularPagoResponse)
async def recalcular_pago(
    request: RecalcularPagoRequest,
    use_case: RecalcularPago = Depends(obtener_recalculo),
    tenant_id: str = Depends(obtener_tenant),
):
    """
    Recalcula el pago de un instructor en un período.
    
    Los errores de cálculo se devuelven con `success=false` (HTTP 200);
    solo un recálculo concurrente para la misma clave responde 409.
    """
    overrides = OverridesRecalculo(
        categorias_manuales=request.categorias_manuales,
        reajuste=(
            Reajuste(valor=request.reajuste, tipo=request.tipo_reajuste)
            if request.reajuste is not None
            else None
        ),
        asignado_por=request.asignado_por,
    )

    resultado = await use_case.execute(request.instructor_id, request.periodo_id, overrides)

    if resultado.conflicto:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=resultado.error)

    if resultado.exito:
        await redis_cache.delete(
            f"categorias:{tenant_id}:{request.instructor_id}:{request.periodo_id}"
        )

    return RecalcularPagoResponse(
        success=resultado.exito,
        message=resultado.mensaje,
        estado=resultado.estado.value,
        payment_id=resultado.pago_id,
        skipped=resultado.omitido,
        logs=resultado.logs,
        pago=pago_a_response(resultado.pago) if resultado.pago else None,
        error=resultado.error,
        error_type=resultado.tipo_error,
    )


@router.post("/recalcular-periodo", response_model=RecalcularPeriodoResponse)
async def recalcular_periodo(
    request: RecalcularPeriodoRequest,
    recalculo: RecalcularPago = Depends(obtener_recalculo),
    tenant_id: str = Depends(obtener_tenant),
):
    """Recalcula todos los instructores activos del período, uno por uno."""
    use_case = RecalcularPeriodo(recalculo.catalogo_repo, recalculo.clase_repo, recalculo)

    try:
        resumen = await use_case.execute(request.periodo_id)
    except ErrorValidacion as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    await redis_cache.clear_pattern(f"categorias:{tenant_id}:*:{request.periodo_id}")

    return RecalcularPeriodoResponse(
        periodo_id=resumen.periodo_id,
        message=resumen.mensaje,
        total=resumen.total,
        success_count=resumen.exitosos,
        error_count=resumen.errores,
        skipped_count=resumen.omitidos,
        deleted_payments_count=resumen.pagos_eliminados,
        results=[
            ResultadoInstructorResponse(
                instructor_id=r.instructor_id,
                status=r.estado,
                message=r.mensaje,
                payment_id=r.pago_id,
                error=r.error,
            )
            for r in resumen.resultados
        ],
    )


@router.get("/{instructor_id}/{periodo_id}", response_model=PagoResponse)
async def obtener_pago(
    instructor_id: int = Path(..., gt=0),
    periodo_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(get_db_session),
    tenant_id: str = Depends(obtener_tenant),
):
    """Pago almacenado con su log de cálculo."""
    pago = await PagoRepositoryImpl(session, tenant_id).obtener_pago(instructor_id, periodo_id)
    if pago is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No hay pago para instructor {instructor_id} en período {periodo_id}",
        )
    return pago_a_response(pago)
