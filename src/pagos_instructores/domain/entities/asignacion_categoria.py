"""Entidad de asignación de categoría."""
from dataclasses import dataclass, field

from pagos_instructores.domain.value_objects.categoria import Categoria, RequisitoClave
from pagos_instructores.domain.value_objects.metricas import MetricasInstructor


@dataclass(frozen=True)
class CriterioEvaluado:
    """Resultado de un requisito: (clave, requerido, actual, cumple)."""

    clave: RequisitoClave
    requerido: object
    actual: object
    cumple: bool

    def como_dict(self) -> dict:
        return {
            "clave": self.clave.value,
            "etiqueta": self.clave.etiqueta,
            "requerido": _serializable(self.requerido),
            "actual": _serializable(self.actual),
            "cumple": self.cumple,
        }


@dataclass(frozen=True)
class EvaluacionCategoria:
    """Evaluación completa de una categoría configurada."""

    categoria: Categoria
    criterios: tuple[CriterioEvaluado, ...]

    @property
    def cumple_todo(self) -> bool:
        return all(c.cumple for c in self.criterios)

    def como_dict(self) -> dict:
        return {
            "categoria": self.categoria.value,
            "etiqueta": self.categoria.etiqueta,
            "criterios": [c.como_dict() for c in self.criterios],
            "cumple_todo": self.cumple_todo,
        }


@dataclass(frozen=True)
class AsignacionCategoria:
    """Categoría asignada a (instructor, período, disciplina)."""

    instructor_id: int
    periodo_id: int
    disciplina_id: int
    categoria: Categoria
    manual: bool
    metricas: MetricasInstructor | None = None
    criterios: tuple[CriterioEvaluado, ...] = ()
    evaluaciones: tuple[EvaluacionCategoria, ...] = field(default=())
    asignado_por: str | None = None

    def motivo(self) -> str:
        """Explicación corta para logs de auditoría."""
        if self.manual:
            quien = f" por {self.asignado_por}" if self.asignado_por else ""
            return f"Categoría manual {self.categoria.value}{quien}"
        if not self.criterios:
            return f"{self.categoria.value} por defecto (ninguna categoría superior cumplida)"
        detalle = ", ".join(
            f"{c.clave.value}: {_serializable(c.actual)} vs {_serializable(c.requerido)}"
            f" {'✓' if c.cumple else '✗'}"
            for c in self.criterios
        )
        return f"{self.categoria.value} ({detalle})"


def _serializable(valor: object) -> object:
    if isinstance(valor, (bool, int, str)) or valor is None:
        return valor
    return str(valor)
