"""Implementación del repositorio de pagos y asignaciones."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, delete, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pagos_instructores.application.ports.pago_repository import PagoRepository
from pagos_instructores.domain.entities.asignacion_categoria import (
    AsignacionCategoria,
    CriterioEvaluado,
    EvaluacionCategoria,
)
from pagos_instructores.domain.entities.pago import DetalleClase, Pago
from pagos_instructores.domain.exceptions import ErrorConflicto
from pagos_instructores.domain.value_objects.categoria import Categoria, RequisitoClave
from pagos_instructores.domain.value_objects.estados import EstadoPago
from pagos_instructores.domain.value_objects.metricas import MetricasInstructor
from pagos_instructores.domain.value_objects.reajuste import Reajuste, TipoReajuste
from pagos_instructores.infrastructure.database.models import (
    AsignacionCategoriaModel,
    PagoModel,
)


class PagoRepositoryImpl(PagoRepository):
    """Implementación de repositorio de pagos."""

    def __init__(self, session: AsyncSession, tenant_id: str = "default"):
        self.session = session
        self.tenant_id = tenant_id

    async def _pago_row(self, instructor_id: int, periodo_id: int) -> PagoModel | None:
        query = select(PagoModel).where(
            and_(
                PagoModel.tenant_id == self.tenant_id,
                PagoModel.instructor_id == instructor_id,
                PagoModel.periodo_id == periodo_id,
            )
        )
        return (await self.session.execute(query)).scalar_one_or_none()

    async def _asignacion_rows(
        self,
        instructor_id: int,
        periodo_id: int,
    ) -> list[AsignacionCategoriaModel]:
        query = (
            select(AsignacionCategoriaModel)
            .where(
                and_(
                    AsignacionCategoriaModel.tenant_id == self.tenant_id,
                    AsignacionCategoriaModel.instructor_id == instructor_id,
                    AsignacionCategoriaModel.periodo_id == periodo_id,
                )
            )
            .order_by(AsignacionCategoriaModel.disciplina_id)
        )
        return list((await self.session.execute(query)).scalars().all())

    async def obtener_pago(self, instructor_id: int, periodo_id: int) -> Pago | None:
        row = await self._pago_row(instructor_id, periodo_id)
        return _pago_a_entidad(row) if row else None

    async def listar_asignaciones(
        self,
        instructor_id: int,
        periodo_id: int,
    ) -> list[AsignacionCategoria]:
        rows = await self._asignacion_rows(instructor_id, periodo_id)
        return [_asignacion_a_entidad(row) for row in rows]

    async def guardar_resultado(
        self,
        pago: Pago,
        asignaciones: list[AsignacionCategoria],
    ) -> Pago:
        """Upsert del pago y las asignaciones dentro de un savepoint."""
        try:
            async with self.session.begin_nested():
                row = await self._pago_row(pago.instructor_id, pago.periodo_id)
                if row is None:
                    row = PagoModel(
                        tenant_id=self.tenant_id,
                        instructor_id=pago.instructor_id,
                        periodo_id=pago.periodo_id,
                    )
                    self.session.add(row)
                _volcar_pago(row, pago)

                previas = {
                    r.disciplina_id: r
                    for r in await self._asignacion_rows(pago.instructor_id, pago.periodo_id)
                }
                disciplinas = set()
                for asignacion in asignaciones:
                    disciplinas.add(asignacion.disciplina_id)
                    await self._upsert_asignacion(
                        asignacion, previas.get(asignacion.disciplina_id)
                    )

                # Asignaciones automáticas de disciplinas sin clases en este cálculo
                for disciplina_id, previa in previas.items():
                    if disciplina_id not in disciplinas and not previa.manual:
                        await self.session.delete(previa)

                await self.session.flush()
        except IntegrityError as e:
            raise ErrorConflicto(
                f"El pago del instructor {pago.instructor_id} en el período {pago.periodo_id}"
                " fue escrito por otra operación; reintente"
            ) from e

        await self.session.refresh(row)
        return _pago_a_entidad(row)

    async def _upsert_asignacion(
        self,
        asignacion: AsignacionCategoria,
        row: AsignacionCategoriaModel | None,
    ) -> AsignacionCategoriaModel:
        if row is None:
            row = AsignacionCategoriaModel(
                tenant_id=self.tenant_id,
                instructor_id=asignacion.instructor_id,
                periodo_id=asignacion.periodo_id,
                disciplina_id=asignacion.disciplina_id,
            )
            self.session.add(row)

        row.categoria = asignacion.categoria.value
        row.manual = asignacion.manual
        row.asignado_por = asignacion.asignado_por
        row.metricas = asignacion.metricas.como_dict() if asignacion.metricas else None
        row.criterios = [c.como_dict() for c in asignacion.criterios]
        row.evaluaciones = [e.como_dict() for e in asignacion.evaluaciones]
        return row

    async def guardar_asignacion(self, asignacion: AsignacionCategoria) -> AsignacionCategoria:
        query = select(AsignacionCategoriaModel).where(
            and_(
                AsignacionCategoriaModel.tenant_id == self.tenant_id,
                AsignacionCategoriaModel.instructor_id == asignacion.instructor_id,
                AsignacionCategoriaModel.periodo_id == asignacion.periodo_id,
                AsignacionCategoriaModel.disciplina_id == asignacion.disciplina_id,
            )
        )
        existente = (await self.session.execute(query)).scalar_one_or_none()
        row = await self._upsert_asignacion(asignacion, existente)
        await self.session.flush()
        return _asignacion_a_entidad(row)

    async def eliminar_asignacion_manual(
        self,
        instructor_id: int,
        periodo_id: int,
        disciplina_id: int,
    ) -> bool:
        result = await self.session.execute(
            delete(AsignacionCategoriaModel).where(
                and_(
                    AsignacionCategoriaModel.tenant_id == self.tenant_id,
                    AsignacionCategoriaModel.instructor_id == instructor_id,
                    AsignacionCategoriaModel.periodo_id == periodo_id,
                    AsignacionCategoriaModel.disciplina_id == disciplina_id,
                    AsignacionCategoriaModel.manual.is_(True),
                )
            )
        )
        return result.rowcount > 0

    async def confirmar(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ErrorConflicto("El pago fue escrito por otra operación; reintente") from e
        except SQLAlchemyError:
            await self.session.rollback()
            raise


def _volcar_pago(row: PagoModel, pago: Pago) -> None:
    row.monto_base = pago.monto_base
    row.bonos = pago.bonos
    row.penalizaciones = pago.penalizaciones
    row.reajuste = pago.reajuste.valor
    row.tipo_reajuste = pago.reajuste.tipo.value
    row.monto_reajuste = pago.monto_reajuste
    row.subtotal_reajustado = pago.subtotal_reajustado
    row.retencion = pago.retencion
    row.pago_final = pago.pago_final
    row.estado = pago.estado.value
    row.log_calculo = list(pago.log_calculo)
    row.detalle_clases = [d.como_dict() for d in pago.detalle_clases]
    row.detalles = dict(pago.detalles)
    row.comentarios = pago.comentarios


def _pago_a_entidad(row: PagoModel) -> Pago:
    return Pago(
        id=row.id,
        instructor_id=row.instructor_id,
        periodo_id=row.periodo_id,
        monto_base=Decimal(row.monto_base),
        bonos=Decimal(row.bonos),
        penalizaciones=Decimal(row.penalizaciones),
        reajuste=Reajuste(valor=Decimal(row.reajuste), tipo=TipoReajuste(row.tipo_reajuste)),
        monto_reajuste=Decimal(row.monto_reajuste),
        subtotal_reajustado=Decimal(row.subtotal_reajustado),
        retencion=Decimal(row.retencion),
        pago_final=Decimal(row.pago_final),
        estado=EstadoPago(row.estado),
        log_calculo=tuple(row.log_calculo or ()),
        detalle_clases=tuple(_detalle_desde_dict(d) for d in row.detalle_clases or ()),
        comentarios=row.comentarios,
        creado_en=row.creado_en,
        actualizado_en=row.actualizado_en,
        detalles=dict(row.detalles or {}),
    )


def _detalle_desde_dict(data: dict) -> DetalleClase:
    return DetalleClase(
        clase_id=data["clase_id"],
        disciplina_id=data["disciplina_id"],
        categoria=data["categoria"],
        estudio=data["estudio"],
        inicio=datetime.fromisoformat(data["inicio"]),
        cupos=data["cupos"],
        reservas=data["reservas"],
        tarifa=Decimal(data["tarifa"]),
        tipo_tarifa=data["tipo_tarifa"],
        monto=Decimal(data["monto"]),
        es_full_house=data["es_full_house"],
        numero_versus=data.get("numero_versus"),
    )


def _criterio_desde_dict(data: dict) -> CriterioEvaluado:
    return CriterioEvaluado(
        clave=RequisitoClave(data["clave"]),
        requerido=data["requerido"],
        actual=data["actual"],
        cumple=data["cumple"],
    )


def _asignacion_a_entidad(row: AsignacionCategoriaModel) -> AsignacionCategoria:
    metricas = None
    if row.metricas:
        datos = dict(row.metricas)
        metricas = MetricasInstructor(
            instructor_id=row.instructor_id,
            periodo_id=row.periodo_id,
            ocupacion=Decimal(datos.pop("ocupacion")),
            pago_workshops=Decimal(datos.pop("pago_workshops", "0")),
            **datos,
        )

    return AsignacionCategoria(
        instructor_id=row.instructor_id,
        periodo_id=row.periodo_id,
        disciplina_id=row.disciplina_id,
        categoria=Categoria(row.categoria),
        manual=row.manual,
        metricas=metricas,
        criterios=tuple(_criterio_desde_dict(c) for c in row.criterios or ()),
        evaluaciones=tuple(
            EvaluacionCategoria(
                categoria=Categoria(e["categoria"]),
                criterios=tuple(_criterio_desde_dict(c) for c in e["criterios"]),
            )
            for e in row.evaluaciones or ()
        ),
        asignado_por=row.asignado_por,
    )
