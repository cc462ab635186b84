"""Puerto (interfaz) para clases y hechos de cumplimiento."""
from abc import ABC, abstractmethod

from pagos_instructores.domain.entities.clase import Clase
from pagos_instructores.domain.value_objects.metricas import HechosCumplimiento


class ClaseRepository(ABC):
    """Interfaz para la fuente de clases y reservas."""

    @abstractmethod
    async def listar_clases(self, instructor_id: int, periodo_id: int) -> list[Clase]:
        """Clases del instructor en el período."""
        pass

    @abstractmethod
    async def contar_clases(self, instructor_id: int, periodo_id: int) -> int:
        """Cantidad de clases del instructor en el período."""
        pass

    @abstractmethod
    async def obtener_hechos_cumplimiento(
        self,
        instructor_id: int,
        periodo_id: int,
    ) -> HechosCumplimiento:
        """Participación en eventos, lineamientos y contadores externos."""
        pass
