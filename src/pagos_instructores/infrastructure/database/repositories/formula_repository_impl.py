"""Implementación del repositorio de fórmulas y requisitos."""
from sqlalchemy import select, delete, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.application.ports.formula_repository import FormulaRepository
from pagos_instructores.domain.entities.formula import Formula
from pagos_instructores.domain.entities.requisitos_categoria import RequisitosCategoria
from pagos_instructores.domain.exceptions import ErrorConflicto
from pagos_instructores.domain.value_objects.categoria import Categoria
from pagos_instructores.infrastructure.database.models import (
    CATEGORIA_POR_DEFECTO,
    FormulaModel,
    RequisitoCategoriaModel,
)


class FormulaRepositoryImpl(FormulaRepository):
    """Implementación de repositorio de configuración de fórmulas."""

    def __init__(self, session: AsyncSession, tenant_id: str = "default"):
        self.session = session
        self.tenant_id = tenant_id

    @staticmethod
    def _a_entidad(row: FormulaModel) -> Formula:
        return Formula.desde_dict(
            periodo_id=row.periodo_id,
            disciplina_id=row.disciplina_id,
            categoria=(
                None if row.categoria == CATEGORIA_POR_DEFECTO else Categoria(row.categoria)
            ),
            terminos=row.terminos,
            id=row.id,
        )

    async def listar_formulas(self, periodo_id: int, disciplina_id: int) -> list[Formula]:
        query = (
            select(FormulaModel)
            .where(
                and_(
                    FormulaModel.tenant_id == self.tenant_id,
                    FormulaModel.periodo_id == periodo_id,
                    FormulaModel.disciplina_id == disciplina_id,
                )
            )
            .order_by(FormulaModel.id)
        )
        rows = (await self.session.execute(query)).scalars().all()
        return [self._a_entidad(row) for row in rows]

    async def listar_formulas_periodo(self, periodo_id: int) -> list[Formula]:
        query = (
            select(FormulaModel)
            .where(
                and_(
                    FormulaModel.tenant_id == self.tenant_id,
                    FormulaModel.periodo_id == periodo_id,
                )
            )
            .order_by(FormulaModel.disciplina_id, FormulaModel.id)
        )
        rows = (await self.session.execute(query)).scalars().all()
        return [self._a_entidad(row) for row in rows]

    async def obtener_requisitos(
        self,
        periodo_id: int,
        disciplina_id: int,
    ) -> RequisitosCategoria | None:
        query = select(RequisitoCategoriaModel).where(
            and_(
                RequisitoCategoriaModel.tenant_id == self.tenant_id,
                RequisitoCategoriaModel.periodo_id == periodo_id,
                RequisitoCategoriaModel.disciplina_id == disciplina_id,
            )
        )
        rows = (await self.session.execute(query)).scalars().all()
        if not rows:
            return None
        return RequisitosCategoria.desde_dict(
            periodo_id,
            disciplina_id,
            {row.categoria: row.umbrales for row in rows},
        )

    async def reemplazar_formulas_periodo(self, origen_id: int, destino_id: int) -> int:
        """Borra el destino y copia fórmulas y requisitos dentro de un savepoint."""
        formulas = (
            await self.session.execute(
                select(FormulaModel).where(
                    and_(
                        FormulaModel.tenant_id == self.tenant_id,
                        FormulaModel.periodo_id == origen_id,
                    )
                )
            )
        ).scalars().all()
        requisitos = (
            await self.session.execute(
                select(RequisitoCategoriaModel).where(
                    and_(
                        RequisitoCategoriaModel.tenant_id == self.tenant_id,
                        RequisitoCategoriaModel.periodo_id == origen_id,
                    )
                )
            )
        ).scalars().all()

        async with self.session.begin_nested():
            await self.session.execute(
                delete(FormulaModel).where(
                    and_(
                        FormulaModel.tenant_id == self.tenant_id,
                        FormulaModel.periodo_id == destino_id,
                    )
                )
            )
            await self.session.execute(
                delete(RequisitoCategoriaModel).where(
                    and_(
                        RequisitoCategoriaModel.tenant_id == self.tenant_id,
                        RequisitoCategoriaModel.periodo_id == destino_id,
                    )
                )
            )

            self.session.add_all(
                FormulaModel(
                    tenant_id=self.tenant_id,
                    periodo_id=destino_id,
                    disciplina_id=f.disciplina_id,
                    categoria=f.categoria,
                    terminos=list(f.terminos),
                )
                for f in formulas
            )
            self.session.add_all(
                RequisitoCategoriaModel(
                    tenant_id=self.tenant_id,
                    periodo_id=destino_id,
                    disciplina_id=r.disciplina_id,
                    categoria=r.categoria,
                    umbrales=dict(r.umbrales),
                )
                for r in requisitos
            )
            await self.session.flush()

        return len(formulas)

    async def confirmar(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ErrorConflicto("Las fórmulas del período fueron escritas por otra operación") from e
        except SQLAlchemyError:
            await self.session.rollback()
            raise
