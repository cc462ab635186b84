"""Caso de uso: Recalcular el pago de un instructor en un período."""
from collections import defaultdict
from dataclasses import dataclass, field, replace
from decimal import Decimal

from pagos_instructores.application.ports.bloqueo import BloqueoRecalculo
from pagos_instructores.application.ports.catalogo_repository import CatalogoRepository
from pagos_instructores.application.ports.clase_repository import ClaseRepository
from pagos_instructores.application.ports.formula_repository import FormulaRepository
from pagos_instructores.application.ports.pago_repository import PagoRepository
from pagos_instructores.domain.entities.asignacion_categoria import AsignacionCategoria
from pagos_instructores.domain.entities.clase import Clase
from pagos_instructores.domain.entities.pago import Pago, ResultadoEvaluacion
from pagos_instructores.domain.exceptions import ErrorConflicto, ErrorPagos, ErrorValidacion
from pagos_instructores.domain.services.agregador_metricas import AgregadorMetricas
from pagos_instructores.domain.services.calculadora_pago_final import CalculadoraPagoFinal
from pagos_instructores.domain.services.evaluador_pago import EvaluadorPago
from pagos_instructores.domain.services.resolvedor_categoria import ResolvedorCategoria
from pagos_instructores.domain.services.resolvedor_formula import ResolvedorFormula
from pagos_instructores.domain.value_objects.categoria import Categoria
from pagos_instructores.domain.value_objects.estados import EstadoRecalculo
from pagos_instructores.domain.value_objects.reajuste import Reajuste
from pagos_instructores.infrastructure.config.logging import logger


@dataclass(frozen=True)
class OverridesRecalculo:
    """Valores a preservar o forzar durante el recálculo."""

    categorias_manuales: dict[int, Categoria] = field(default_factory=dict)
    reajuste: Reajuste | None = None
    asignado_por: str | None = None


@dataclass
class ResultadoRecalculo:
    """Resultado estructurado; nunca se propaga una excepción al llamador."""

    exito: bool
    mensaje: str
    estado: EstadoRecalculo
    logs: list[str]
    pago_id: int | None = None
    pago: Pago | None = None
    asignaciones: list[AsignacionCategoria] = field(default_factory=list)
    error: str | None = None
    tipo_error: str | None = None
    omitido: bool = False
    reemplazo_previo: bool = False

    @property
    def conflicto(self) -> bool:
        return self.tipo_error == ErrorConflicto.__name__


class RecalcularPago:
    """
    Caso de uso para recalcular un pago de forma idempotente.

    Pasos: métricas → categoría → fórmula → evaluación → reajuste y
    retención → persistencia atómica. El commit ocurre antes de liberar
    el bloqueo.
    """

    def __init__(
        self,
        catalogo_repo: CatalogoRepository,
        clase_repo: ClaseRepository,
        formula_repo: FormulaRepository,
        pago_repo: PagoRepository,
        bloqueo: BloqueoRecalculo,
        agregador: AgregadorMetricas,
        tasa_retencion: Decimal = CalculadoraPagoFinal.TASA_RETENCION,
        tenant_id: str = "default",
    ):
        self.catalogo_repo = catalogo_repo
        self.clase_repo = clase_repo
        self.formula_repo = formula_repo
        self.pago_repo = pago_repo
        self.bloqueo = bloqueo
        self.agregador = agregador
        self.tasa_retencion = tasa_retencion
        self.tenant_id = tenant_id

    def clave_bloqueo(self, instructor_id: int, periodo_id: int) -> str:
        return f"recalculo:{self.tenant_id}:{instructor_id}:{periodo_id}"

    async def execute(
        self,
        instructor_id: int,
        periodo_id: int,
        overrides: OverridesRecalculo | None = None,
    ) -> ResultadoRecalculo:
        """Ejecuta el caso de uso."""
        logs: list[str] = [
            f"🚀 Iniciando cálculo para instructor {instructor_id}, período {periodo_id}"
        ]
        estado = EstadoRecalculo.PENDING

        try:
            async with self.bloqueo.mantener(self.clave_bloqueo(instructor_id, periodo_id)):
                estado = EstadoRecalculo.RUNNING
                return await self._ejecutar(instructor_id, periodo_id, overrides, logs)

        except ErrorPagos as e:
            logs.append(f"❌ Error en cálculo: {e}")
            logger.warning(
                f"Recálculo fallido instructor={instructor_id} periodo={periodo_id}"
                f" estado={estado.value}: {type(e).__name__}: {e}"
            )
            return self._fallo(logs, e)

        except Exception as e:
            logs.append(f"❌ Error inesperado: {e}")
            logger.exception(
                f"Error inesperado recalculando instructor={instructor_id} periodo={periodo_id}"
            )
            return self._fallo(logs, e)

    @staticmethod
    def _fallo(logs: list[str], error: Exception) -> ResultadoRecalculo:
        return ResultadoRecalculo(
            exito=False,
            mensaje="Error al calcular el pago",
            estado=EstadoRecalculo.FAILED,
            logs=logs,
            error=str(error),
            tipo_error=type(error).__name__,
        )

    async def _ejecutar(
        self,
        instructor_id: int,
        periodo_id: int,
        overrides: OverridesRecalculo | None,
        logs: list[str],
    ) -> ResultadoRecalculo:
        overrides = overrides or OverridesRecalculo()

        periodo = await self.catalogo_repo.obtener_periodo(periodo_id)
        if periodo is None:
            raise ErrorValidacion(f"Período {periodo_id} no encontrado")
        if not await self.catalogo_repo.existe_instructor(instructor_id):
            raise ErrorValidacion(f"Instructor {instructor_id} no encontrado")

        previo = await self.pago_repo.obtener_pago(instructor_id, periodo_id)
        if previo is not None:
            logs.append(f"📋 Pago existente encontrado: ID {previo.id}, estado {previo.estado.value}")
            if not previo.estado.es_recalculable:
                logs.append(f"✅ Pago en estado {previo.estado.value}, no se modificará")
                return ResultadoRecalculo(
                    exito=True,
                    mensaje=f"Pago en estado {previo.estado.value}, no se recalculó",
                    estado=EstadoRecalculo.SUCCEEDED,
                    logs=logs,
                    pago_id=previo.id,
                    pago=previo,
                    omitido=True,
                )
        else:
            logs.append("📋 No se encontró pago existente para este instructor y período")

        clases = await self.clase_repo.listar_clases(instructor_id, periodo_id)
        if not clases:
            raise ErrorValidacion(f"No hay clases para este instructor en el período {periodo}")

        hechos = await self.clase_repo.obtener_hechos_cumplimiento(instructor_id, periodo_id)
        previas = {
            a.disciplina_id: a
            for a in await self.pago_repo.listar_asignaciones(instructor_id, periodo_id)
        }

        log_calculo: list[str] = [f"📝 Período {periodo}: {len(clases)} clases"]
        total = ResultadoEvaluacion()
        asignaciones: list[AsignacionCategoria] = []

        for disciplina_id, clases_disciplina in self._agrupar_por_disciplina(clases):
            metricas = self.agregador.agregar(instructor_id, periodo_id, clases_disciplina, hechos)
            log_calculo.append(f"📊 Métricas disciplina {disciplina_id}: {metricas.como_dict()}")

            manual, asignado_por = self._categoria_manual(disciplina_id, overrides, previas)
            requisitos = (
                None
                if manual is not None
                else await self.formula_repo.obtener_requisitos(periodo_id, disciplina_id)
            )
            asignacion = ResolvedorCategoria.resolver(
                metricas, manual, requisitos, disciplina_id, asignado_por
            )
            log_calculo.append(f"🏷️ Disciplina {disciplina_id}: {asignacion.motivo()}")

            formulas = await self.formula_repo.listar_formulas(periodo_id, disciplina_id)
            formula = ResolvedorFormula.seleccionar(
                formulas, periodo_id, disciplina_id, asignacion.categoria
            )
            evaluado = EvaluadorPago.evaluar(
                formula, metricas, clases_disciplina, asignacion.categoria
            )
            log_calculo.extend(evaluado.log)

            total = total + replace(evaluado, log=())
            asignaciones.append(asignacion)

        if overrides.reajuste is not None:
            reajuste = overrides.reajuste
        elif previo is not None:
            reajuste = previo.reajuste
            if not reajuste.es_nulo:
                logs.append(f"♻️ Reajuste preservado: {reajuste.describir()}")
        else:
            reajuste = Reajuste.ninguno()

        pago = CalculadoraPagoFinal.aplicar(
            total,
            reajuste,
            self.tasa_retencion,
            instructor_id=instructor_id,
            periodo_id=periodo_id,
        )
        log_calculo.extend(pago.log_calculo)
        pago = replace(
            pago,
            log_calculo=tuple(log_calculo),
            comentarios=previo.comentarios if previo else "Cálculo automático",
            detalles={
                "asignaciones": [self._resumen_asignacion(a) for a in asignaciones],
            },
        )

        guardado = await self.pago_repo.guardar_resultado(pago, asignaciones)
        # Dentro del bloqueo: nadie lee el estado previo hasta que esto se confirma
        await self.pago_repo.confirmar()

        logs.extend(log_calculo)
        if previo is not None:
            logs.append("🗑️ Pago previo reemplazado (reajuste y comentarios preservados)")
        logs.append(f"✅ Pago guardado: ID {guardado.id}")
        logger.info(
            f"Pago recalculado instructor={instructor_id} periodo={periodo_id}"
            f" final={guardado.pago_final}"
        )

        return ResultadoRecalculo(
            exito=True,
            mensaje="Pago recalculado exitosamente" if previo else "Pago calculado exitosamente",
            estado=EstadoRecalculo.SUCCEEDED,
            logs=logs,
            pago_id=guardado.id,
            pago=guardado,
            asignaciones=asignaciones,
            reemplazo_previo=previo is not None,
        )

    @staticmethod
    def _agrupar_por_disciplina(clases: list[Clase]) -> list[tuple[int, list[Clase]]]:
        grupos: dict[int, list[Clase]] = defaultdict(list)
        for clase in clases:
            grupos[clase.disciplina_id].append(clase)
        return sorted(grupos.items())

    @staticmethod
    def _categoria_manual(
        disciplina_id: int,
        overrides: OverridesRecalculo,
        previas: dict[int, AsignacionCategoria],
    ) -> tuple[Categoria | None, str | None]:
        """Override explícito, luego asignación manual persistida."""
        if disciplina_id in overrides.categorias_manuales:
            return overrides.categorias_manuales[disciplina_id], overrides.asignado_por
        previa = previas.get(disciplina_id)
        if previa is not None and previa.manual:
            return previa.categoria, previa.asignado_por
        return None, None

    @staticmethod
    def _resumen_asignacion(asignacion: AsignacionCategoria) -> dict:
        return {
            "disciplina_id": asignacion.disciplina_id,
            "categoria": asignacion.categoria.value,
            "manual": asignacion.manual,
            "criterios": [c.como_dict() for c in asignacion.criterios],
        }
