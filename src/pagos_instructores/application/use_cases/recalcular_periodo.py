"""Caso de uso: Recalcular todos los pagos de un período."""
from dataclasses import dataclass, field

from pagos_instructores.application.ports.catalogo_repository import CatalogoRepository
from pagos_instructores.application.ports.clase_repository import ClaseRepository
from pagos_instructores.application.use_cases.recalcular_pago import RecalcularPago
from pagos_instructores.domain.exceptions import ErrorValidacion
from pagos_instructores.infrastructure.config.logging import logger


@dataclass
class ResultadoInstructor:
    """Resultado de un instructor dentro del lote."""

    instructor_id: int
    estado: str  # success | error | skipped
    mensaje: str
    pago_id: int | None = None
    error: str | None = None


@dataclass
class ResumenLote:
    """Resumen del recálculo por lote."""

    periodo_id: int
    exitosos: int = 0
    errores: int = 0
    omitidos: int = 0
    pagos_eliminados: int = 0
    resultados: list[ResultadoInstructor] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.resultados)

    @property
    def mensaje(self) -> str:
        return (
            f"Cálculo completado: {self.exitosos} exitosos, {self.errores} errores,"
            f" {self.omitidos} omitidos"
        )


class RecalcularPeriodo:
    """
    Caso de uso para recalcular todos los instructores activos de un período.

    Recorre los instructores de forma secuencial; el fallo de uno no
    detiene al resto.
    """

    def __init__(
        self,
        catalogo_repo: CatalogoRepository,
        clase_repo: ClaseRepository,
        recalcular: RecalcularPago,
    ):
        self.catalogo_repo = catalogo_repo
        self.clase_repo = clase_repo
        self.recalcular = recalcular

    async def execute(self, periodo_id: int) -> ResumenLote:
        """
        Ejecuta el lote.

        Raises:
            ErrorValidacion: si el período no existe
        """
        periodo = await self.catalogo_repo.obtener_periodo(periodo_id)
        if periodo is None:
            raise ErrorValidacion(f"Período {periodo_id} no encontrado")

        instructores = await self.catalogo_repo.listar_instructores_activos()
        logger.info(f"Recalculando período {periodo}: {len(instructores)} instructores activos")

        resumen = ResumenLote(periodo_id=periodo_id)

        for instructor_id in instructores:
            if await self.clase_repo.contar_clases(instructor_id, periodo_id) == 0:
                resumen.omitidos += 1
                resumen.resultados.append(
                    ResultadoInstructor(
                        instructor_id=instructor_id,
                        estado="skipped",
                        mensaje="No tiene clases en este período",
                    )
                )
                continue

            resultado = await self.recalcular.execute(instructor_id, periodo_id)

            if resultado.omitido:
                resumen.omitidos += 1
                estado = "skipped"
            elif resultado.exito:
                resumen.exitosos += 1
                if resultado.reemplazo_previo:
                    resumen.pagos_eliminados += 1
                estado = "success"
            else:
                resumen.errores += 1
                estado = "error"

            resumen.resultados.append(
                ResultadoInstructor(
                    instructor_id=instructor_id,
                    estado=estado,
                    mensaje=resultado.mensaje,
                    pago_id=resultado.pago_id,
                    error=resultado.error,
                )
            )

        logger.info(f"Período {periodo}: {resumen.mensaje}, {resumen.pagos_eliminados} reemplazados")
        return resumen
