"""Servicio de dominio para resolución de categorías de instructor."""
from pagos_instructores.domain.entities.asignacion_categoria import (
    AsignacionCategoria,
    CriterioEvaluado,
    EvaluacionCategoria,
)
from pagos_instructores.domain.entities.requisitos_categoria import RequisitosCategoria, Umbral
from pagos_instructores.domain.exceptions import ErrorConfiguracion
from pagos_instructores.domain.value_objects.categoria import Categoria, RequisitoClave
from pagos_instructores.domain.value_objects.metricas import MetricasInstructor


class ResolvedorCategoria:
    """
    Asigna una categoría a partir de métricas y requisitos.

    Reglas de negocio:
    - Una categoría manual gana siempre y no se evalúan requisitos
    - Se evalúa de SENIOR_AMBASSADOR hacia INSTRUCTOR; gana la primera
      categoría cuyos requisitos configurados se cumplen todos
    - Si ninguna se cumple se asigna INSTRUCTOR
    """

    @staticmethod
    def evaluar_criterio(
        clave: RequisitoClave,
        requerido: Umbral,
        metricas: MetricasInstructor,
    ) -> CriterioEvaluado:
        """Evalúa un requisito individual."""
        actual = metricas.valor(clave)
        if clave.es_booleano:
            cumple = (not requerido) or bool(actual)
        else:
            cumple = actual >= requerido
        return CriterioEvaluado(clave=clave, requerido=requerido, actual=actual, cumple=cumple)

    @classmethod
    def evaluar_categoria(
        cls,
        categoria: Categoria,
        requisitos: RequisitosCategoria,
        metricas: MetricasInstructor,
    ) -> EvaluacionCategoria | None:
        umbrales = requisitos.para(categoria)
        if umbrales is None:
            return None
        criterios = tuple(
            cls.evaluar_criterio(clave, requerido, metricas)
            for clave, requerido in umbrales.items()
        )
        return EvaluacionCategoria(categoria=categoria, criterios=criterios)

    @classmethod
    def resolver(
        cls,
        metricas: MetricasInstructor,
        manual: Categoria | None,
        requisitos: RequisitosCategoria | None,
        disciplina_id: int,
        asignado_por: str | None = None,
    ) -> AsignacionCategoria:
        """
        Resuelve la categoría.

        Args:
            metricas: Snapshot del instructor en el período
            manual: Categoría forzada por un administrador (opcional)
            requisitos: Requisitos del período y disciplina
            disciplina_id: Disciplina evaluada
            asignado_por: Identidad del administrador para asignaciones manuales

        Returns:
            AsignacionCategoria con el trazado de criterios

        Raises:
            ErrorConfiguracion: si no hay requisitos para evaluar
        """
        if manual is not None:
            return AsignacionCategoria(
                instructor_id=metricas.instructor_id,
                periodo_id=metricas.periodo_id,
                disciplina_id=disciplina_id,
                categoria=manual,
                manual=True,
                asignado_por=asignado_por,
            )

        if requisitos is None or not requisitos.umbrales:
            raise ErrorConfiguracion(
                f"No hay requisitos de categoría para período {metricas.periodo_id}"
                f" y disciplina {disciplina_id}",
                clave=f"{metricas.periodo_id}/{disciplina_id}",
            )

        evaluaciones = []
        for categoria in Categoria.por_prioridad():
            evaluacion = cls.evaluar_categoria(categoria, requisitos, metricas)
            if evaluacion is not None:
                evaluaciones.append(evaluacion)

        elegida = next((e for e in evaluaciones if e.cumple_todo), None)
        if elegida is None:
            categoria = Categoria.INSTRUCTOR
            instructor = next((e for e in evaluaciones if e.categoria == categoria), None)
            criterios = instructor.criterios if instructor else ()
        else:
            categoria = elegida.categoria
            criterios = elegida.criterios

        return AsignacionCategoria(
            instructor_id=metricas.instructor_id,
            periodo_id=metricas.periodo_id,
            disciplina_id=disciplina_id,
            categoria=categoria,
            manual=False,
            metricas=metricas,
            criterios=criterios,
            evaluaciones=tuple(evaluaciones),
        )
