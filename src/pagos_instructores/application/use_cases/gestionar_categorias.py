"""Casos de uso: consulta y asignación manual de categorías."""
from pagos_instructores.application.ports.catalogo_repository import CatalogoRepository
from pagos_instructores.application.ports.pago_repository import PagoRepository
from pagos_instructores.domain.entities.asignacion_categoria import AsignacionCategoria
from pagos_instructores.domain.exceptions import ErrorValidacion
from pagos_instructores.domain.value_objects.categoria import Categoria


class ObtenerCategoria:
    """Caso de uso de solo lectura para asignaciones de categoría."""

    def __init__(self, pago_repo: PagoRepository):
        self.pago_repo = pago_repo

    async def execute(
        self,
        instructor_id: int,
        periodo_id: int,
        disciplina_id: int | None = None,
    ) -> list[AsignacionCategoria]:
        asignaciones = await self.pago_repo.listar_asignaciones(instructor_id, periodo_id)
        if disciplina_id is not None:
            asignaciones = [a for a in asignaciones if a.disciplina_id == disciplina_id]
        return asignaciones


class AsignarCategoriaManual:
    """
    Fija una categoría manual; se respeta en cada recálculo hasta que se
    elimine explícitamente.
    """

    def __init__(self, catalogo_repo: CatalogoRepository, pago_repo: PagoRepository):
        self.catalogo_repo = catalogo_repo
        self.pago_repo = pago_repo

    async def execute(
        self,
        instructor_id: int,
        periodo_id: int,
        disciplina_id: int,
        categoria: Categoria,
        asignado_por: str | None = None,
    ) -> AsignacionCategoria:
        if await self.catalogo_repo.obtener_periodo(periodo_id) is None:
            raise ErrorValidacion(f"Período {periodo_id} no encontrado")
        if not await self.catalogo_repo.existe_instructor(instructor_id):
            raise ErrorValidacion(f"Instructor {instructor_id} no encontrado")

        return await self.pago_repo.guardar_asignacion(
            AsignacionCategoria(
                instructor_id=instructor_id,
                periodo_id=periodo_id,
                disciplina_id=disciplina_id,
                categoria=categoria,
                manual=True,
                asignado_por=asignado_por,
            )
        )


class LimpiarCategoriaManual:
    """Elimina la categoría manual; el próximo recálculo la evalúa de nuevo."""

    def __init__(self, pago_repo: PagoRepository):
        self.pago_repo = pago_repo

    async def execute(self, instructor_id: int, periodo_id: int, disciplina_id: int) -> bool:
        return await self.pago_repo.eliminar_asignacion_manual(
            instructor_id, periodo_id, disciplina_id
        )
