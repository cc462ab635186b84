"""Implementación del repositorio de catálogos."""
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.application.ports.catalogo_repository import CatalogoRepository
from pagos_instructores.domain.value_objects.periodo import Periodo
from pagos_instructores.infrastructure.database.models import InstructorModel, PeriodoModel


class CatalogoRepositoryImpl(CatalogoRepository):
    """Implementación de repositorio de instructores y períodos."""

    def __init__(self, session: AsyncSession, tenant_id: str = "default"):
        self.session = session
        self.tenant_id = tenant_id

    async def obtener_periodo(self, periodo_id: int) -> Periodo | None:
        query = select(PeriodoModel).where(
            and_(
                PeriodoModel.id == periodo_id,
                PeriodoModel.tenant_id == self.tenant_id,
            )
        )
        row = (await self.session.execute(query)).scalar_one_or_none()
        if row is None:
            return None
        return Periodo(anio=row.anio, numero=row.numero)

    async def existe_instructor(self, instructor_id: int) -> bool:
        query = select(InstructorModel.id).where(
            and_(
                InstructorModel.id == instructor_id,
                InstructorModel.tenant_id == self.tenant_id,
            )
        )
        return (await self.session.execute(query)).scalar_one_or_none() is not None

    async def listar_instructores_activos(self) -> list[int]:
        query = (
            select(InstructorModel.id)
            .where(
                and_(
                    InstructorModel.tenant_id == self.tenant_id,
                    InstructorModel.activo.is_(True),
                )
            )
            .order_by(InstructorModel.id)
        )
        return list((await self.session.execute(query)).scalars().all())
