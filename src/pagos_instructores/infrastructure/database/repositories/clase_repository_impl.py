"""Implementación del repositorio de clases."""
from decimal import Decimal

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.application.ports.clase_repository import ClaseRepository
from pagos_instructores.domain.entities.clase import Clase
from pagos_instructores.domain.value_objects.metricas import HechosCumplimiento
from pagos_instructores.infrastructure.database.models import ClaseModel, CumplimientoModel


class ClaseRepositoryImpl(ClaseRepository):
    """Implementación de repositorio de clases y hechos de cumplimiento."""

    def __init__(self, session: AsyncSession, tenant_id: str = "default"):
        self.session = session
        self.tenant_id = tenant_id

    def _filtro(self, instructor_id: int, periodo_id: int):
        return and_(
            ClaseModel.tenant_id == self.tenant_id,
            ClaseModel.instructor_id == instructor_id,
            ClaseModel.periodo_id == periodo_id,
        )

    async def listar_clases(self, instructor_id: int, periodo_id: int) -> list[Clase]:
        query = (
            select(ClaseModel)
            .where(self._filtro(instructor_id, periodo_id))
            .order_by(ClaseModel.fecha, ClaseModel.id)
        )
        rows = (await self.session.execute(query)).scalars().all()

        return [
            Clase(
                id=row.id,
                instructor_id=row.instructor_id,
                periodo_id=row.periodo_id,
                disciplina_id=row.disciplina_id,
                estudio=row.estudio,
                salon=row.salon,
                inicio=row.fecha,
                cupos=row.cupos,
                reservas_totales=row.reservas_totales,
                reservas_pagadas=row.reservas_pagadas,
                texto_especial=row.texto_especial,
                numero_versus=row.numero_versus,
            )
            for row in rows
        ]

    async def contar_clases(self, instructor_id: int, periodo_id: int) -> int:
        query = select(func.count(ClaseModel.id)).where(self._filtro(instructor_id, periodo_id))
        return (await self.session.execute(query)).scalar_one()

    async def obtener_hechos_cumplimiento(
        self,
        instructor_id: int,
        periodo_id: int,
    ) -> HechosCumplimiento:
        query = select(CumplimientoModel).where(
            and_(
                CumplimientoModel.tenant_id == self.tenant_id,
                CumplimientoModel.instructor_id == instructor_id,
                CumplimientoModel.periodo_id == periodo_id,
            )
        )
        row = (await self.session.execute(query)).scalar_one_or_none()
        if row is None:
            # Sin registro: sin eventos, lineamientos cumplidos
            return HechosCumplimiento()

        return HechosCumplimiento(
            participacion_eventos=row.participacion_eventos,
            cumple_lineamientos=row.cumple_lineamientos,
            covers=row.covers,
            brandeos=row.brandeos,
            theme_rides=row.theme_rides,
            puntos_penalizacion=row.puntos_penalizacion,
            pago_workshops=Decimal(row.pago_workshops or 0),
        )
