"""Puerto (interfaz) para fórmulas y requisitos de categoría."""
from abc import ABC, abstractmethod

from pagos_instructores.domain.entities.formula import Formula
from pagos_instructores.domain.entities.requisitos_categoria import RequisitosCategoria


class FormulaRepository(ABC):
    """Interfaz para configuración de fórmulas."""

    @abstractmethod
    async def listar_formulas(self, periodo_id: int, disciplina_id: int) -> list[Formula]:
        """Fórmulas de un período y disciplina (todas las categorías)."""
        pass

    @abstractmethod
    async def listar_formulas_periodo(self, periodo_id: int) -> list[Formula]:
        """Todas las fórmulas de un período."""
        pass

    @abstractmethod
    async def obtener_requisitos(
        self,
        periodo_id: int,
        disciplina_id: int,
    ) -> RequisitosCategoria | None:
        """Requisitos de categoría de un período y disciplina."""
        pass

    @abstractmethod
    async def reemplazar_formulas_periodo(self, origen_id: int, destino_id: int) -> int:
        """
        Reemplaza las fórmulas y requisitos del destino por los del origen.

        Todo o nada. Devuelve la cantidad de fórmulas copiadas.
        """
        pass

    @abstractmethod
    async def confirmar(self) -> None:
        """Confirma lo guardado; se llama con el bloqueo del período tomado."""
        pass
