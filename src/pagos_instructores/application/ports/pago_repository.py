"""Puerto (interfaz) para pagos y asignaciones de categoría."""
from abc import ABC, abstractmethod

from pagos_instructores.domain.entities.asignacion_categoria import AsignacionCategoria
from pagos_instructores.domain.entities.pago import Pago


class PagoRepository(ABC):
    """Interfaz para persistencia de resultados de cálculo."""

    @abstractmethod
    async def obtener_pago(self, instructor_id: int, periodo_id: int) -> Pago | None:
        """Pago vigente del instructor en el período."""
        pass

    @abstractmethod
    async def listar_asignaciones(
        self,
        instructor_id: int,
        periodo_id: int,
    ) -> list[AsignacionCategoria]:
        """Asignaciones de categoría por disciplina."""
        pass

    @abstractmethod
    async def guardar_resultado(
        self,
        pago: Pago,
        asignaciones: list[AsignacionCategoria],
    ) -> Pago:
        """
        Reemplaza atómicamente el pago y las asignaciones del instructor.

        Si algo falla, el pago y las asignaciones previas quedan intactos.
        """
        pass

    @abstractmethod
    async def guardar_asignacion(self, asignacion: AsignacionCategoria) -> AsignacionCategoria:
        """Crea o sobrescribe una asignación (instructor, período, disciplina)."""
        pass

    @abstractmethod
    async def eliminar_asignacion_manual(
        self,
        instructor_id: int,
        periodo_id: int,
        disciplina_id: int,
    ) -> bool:
        """Elimina una asignación manual; devuelve False si no existía."""
        pass

    @abstractmethod
    async def confirmar(self) -> None:
        """
        Confirma lo guardado; se llama con el bloqueo de recálculo tomado.

        Raises:
            ErrorConflicto: si otra operación escribió la misma clave
        """
        pass
