"""Puerto (interfaz) para catálogos de instructores y períodos."""
from abc import ABC, abstractmethod

from pagos_instructores.domain.value_objects.periodo import Periodo


class CatalogoRepository(ABC):
    """Interfaz para consultar instructores y períodos."""

    @abstractmethod
    async def obtener_periodo(self, periodo_id: int) -> Periodo | None:
        """Obtiene un período por id."""
        pass

    @abstractmethod
    async def existe_instructor(self, instructor_id: int) -> bool:
        """Indica si el instructor existe para el tenant."""
        pass

    @abstractmethod
    async def listar_instructores_activos(self) -> list[int]:
        """Ids de instructores activos, ordenados."""
        pass
