"""Dependencias compartidas de la API v1."""
from typing import Callable

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.application.ports.bloqueo import BloqueoRecalculo
from pagos_instructores.application.use_cases.recalcular_pago import RecalcularPago
from pagos_instructores.domain.services.agregador_metricas import AgregadorMetricas
from pagos_instructores.domain.services.clasificador_horario import ClasificadorHorario
from pagos_instructores.infrastructure.config.settings import Settings, get_settings
from pagos_instructores.infrastructure.database.connection import get_db_session
from pagos_instructores.infrastructure.database.repositories.catalogo_repository_impl import (
    CatalogoRepositoryImpl,
)
from pagos_instructores.infrastructure.database.repositories.clase_repository_impl import (
    ClaseRepositoryImpl,
)
from pagos_instructores.infrastructure.database.repositories.formula_repository_impl import (
    FormulaRepositoryImpl,
)
from pagos_instructores.infrastructure.database.repositories.pago_repository_impl import (
    PagoRepositoryImpl,
)

CAPACIDAD_ADMIN = "pagos:administrar"


def requiere_capacidad(requerida: str) -> Callable:
    """
    Verifica la capacidad en el header `X-Capacidades`.

    La capa de autorización externa lo completa con una lista separada
    por comas.
    """

    async def _checker(
        x_capacidades: str | None = Header(None, alias="X-Capacidades"),
    ) -> set[str]:
        capacidades = {c.strip() for c in (x_capacidades or "").split(",") if c.strip()}
        if requerida not in capacidades:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "code": "capacidad_requerida",
                    "message": "No tiene permiso para realizar esta acción.",
                    "required": requerida,
                },
            )
        return capacidades

    return _checker


async def obtener_tenant(x_tenant_id: str = Header("default", alias="X-Tenant-Id")) -> str:
    return x_tenant_id


def obtener_bloqueo(request: Request) -> BloqueoRecalculo:
    """Bloqueo instalado por el lifespan (Redis o tabla en proceso)."""
    return request.app.state.bloqueo


def construir_recalculo(
    session: AsyncSession,
    tenant_id: str,
    bloqueo: BloqueoRecalculo,
    settings: Settings,
) -> RecalcularPago:
    """Arma el caso de uso de recálculo con sus repositorios."""
    agregador = AgregadorMetricas(
        ClasificadorHorario(settings.horarios_no_prime, settings.zona_horaria),
        brecha_dobleteo_minutos=settings.brecha_dobleteo_minutos,
    )
    return RecalcularPago(
        catalogo_repo=CatalogoRepositoryImpl(session, tenant_id),
        clase_repo=ClaseRepositoryImpl(session, tenant_id),
        formula_repo=FormulaRepositoryImpl(session, tenant_id),
        pago_repo=PagoRepositoryImpl(session, tenant_id),
        bloqueo=bloqueo,
        agregador=agregador,
        tasa_retencion=settings.tasa_retencion,
        tenant_id=tenant_id,
    )


async def obtener_recalculo(
    session: AsyncSession = Depends(get_db_session),
    tenant_id: str = Depends(obtener_tenant),
    bloqueo: BloqueoRecalculo = Depends(obtener_bloqueo),
) -> RecalcularPago:
    return construir_recalculo(session, tenant_id, bloqueo, get_settings())
