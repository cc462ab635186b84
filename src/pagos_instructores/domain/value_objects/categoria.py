"""Value Objects para categorías de instructor y sus requisitos."""
from enum import Enum


class Categoria(str, Enum):
    """Categoría (tier) de un instructor."""

    INSTRUCTOR = "INSTRUCTOR"
    JUNIOR_AMBASSADOR = "JUNIOR_AMBASSADOR"
    AMBASSADOR = "AMBASSADOR"
    SENIOR_AMBASSADOR = "SENIOR_AMBASSADOR"

    @property
    def etiqueta(self) -> str:
        """Nombre para mostrar."""
        etiquetas = {
            Categoria.INSTRUCTOR: "Instructor",
            Categoria.JUNIOR_AMBASSADOR: "Embajador Junior",
            Categoria.AMBASSADOR: "Embajador",
            Categoria.SENIOR_AMBASSADOR: "Embajador Senior",
        }
        return etiquetas[self]

    @classmethod
    def por_prioridad(cls) -> tuple["Categoria", ...]:
        """Categorías de la más alta a la más baja."""
        return ORDEN_PRIORIDAD


ORDEN_PRIORIDAD: tuple[Categoria, ...] = (
    Categoria.SENIOR_AMBASSADOR,
    Categoria.AMBASSADOR,
    Categoria.JUNIOR_AMBASSADOR,
    Categoria.INSTRUCTOR,
)


class RequisitoClave(str, Enum):
    """Requisitos configurables para alcanzar una categoría."""

    OCUPACION = "ocupacion"  # Ratio mínimo 0-1
    CLASES = "clases"  # Clases mínimas en el período
    LOCALES = "locales"  # Locales distintos mínimos
    DOBLETEOS = "dobleteos"  # Dobleteos mínimos
    HORARIOS_NO_PRIME = "horarios_no_prime"  # Clases en horario no prime
    PARTICIPACION_EVENTOS = "participacion_eventos"
    LINEAMIENTOS = "lineamientos"

    @property
    def es_booleano(self) -> bool:
        return self in (RequisitoClave.PARTICIPACION_EVENTOS, RequisitoClave.LINEAMIENTOS)

    @property
    def etiqueta(self) -> str:
        etiquetas = {
            RequisitoClave.OCUPACION: "Ocupación",
            RequisitoClave.CLASES: "Clases",
            RequisitoClave.LOCALES: "Locales en Lima",
            RequisitoClave.DOBLETEOS: "Dobleteos",
            RequisitoClave.HORARIOS_NO_PRIME: "Horarios No Prime",
            RequisitoClave.PARTICIPACION_EVENTOS: "Participación en Eventos",
            RequisitoClave.LINEAMIENTOS: "Cumple Lineamientos",
        }
        return etiquetas[self]
