"""Caso de uso: Duplicar fórmulas entre períodos."""
from dataclasses import dataclass

from pagos_instructores.application.ports.bloqueo import BloqueoRecalculo
from pagos_instructores.application.ports.catalogo_repository import CatalogoRepository
from pagos_instructores.application.ports.formula_repository import FormulaRepository
from pagos_instructores.domain.exceptions import ErrorValidacion
from pagos_instructores.infrastructure.config.logging import logger


@dataclass(frozen=True)
class ResultadoDuplicacion:
    mensaje: str
    copiadas: int


class DuplicarFormulas:
    """
    Caso de uso para copiar el conjunto de fórmulas de un período a otro.

    El destino se reemplaza por completo (no se fusiona). Si el origen no
    tiene fórmulas, el destino no se modifica.
    """

    def __init__(
        self,
        catalogo_repo: CatalogoRepository,
        formula_repo: FormulaRepository,
        bloqueo: BloqueoRecalculo,
        tenant_id: str = "default",
    ):
        self.catalogo_repo = catalogo_repo
        self.formula_repo = formula_repo
        self.bloqueo = bloqueo
        self.tenant_id = tenant_id

    async def execute(self, origen_id: int, destino_id: int) -> ResultadoDuplicacion:
        """
        Ejecuta la duplicación.

        Raises:
            ErrorValidacion: períodos iguales o inexistentes
            ErrorConflicto: otra duplicación en curso hacia el mismo destino
        """
        if origen_id == destino_id:
            raise ErrorValidacion("El período origen y destino deben ser distintos")

        origen = await self.catalogo_repo.obtener_periodo(origen_id)
        if origen is None:
            raise ErrorValidacion("Período origen no encontrado")
        destino = await self.catalogo_repo.obtener_periodo(destino_id)
        if destino is None:
            raise ErrorValidacion("Período destino no encontrado")

        async with self.bloqueo.mantener(f"formulas:{self.tenant_id}:{destino_id}"):
            formulas = await self.formula_repo.listar_formulas_periodo(origen_id)
            if not formulas:
                return ResultadoDuplicacion(
                    mensaje="No se encontraron fórmulas en el período origen",
                    copiadas=0,
                )

            copiadas = await self.formula_repo.reemplazar_formulas_periodo(origen_id, destino_id)
            await self.formula_repo.confirmar()

        logger.info(f"Fórmulas duplicadas {origen} -> {destino}: {copiadas}")
        return ResultadoDuplicacion(
            mensaje=(
                f"Se duplicaron exitosamente {copiadas} fórmulas del Período {origen}"
                f" al Período {destino}"
            ),
            copiadas=copiadas,
        )
