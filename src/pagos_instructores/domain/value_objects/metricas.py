"""Value Objects para métricas de desempeño del instructor."""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class MetricaClave(str, Enum):
    """Métricas disponibles para requisitos y condiciones de fórmula."""

    OCUPACION = "ocupacion"
    CLASES = "clases"
    LOCALES = "locales"
    DOBLETEOS = "dobleteos"
    HORARIOS_NO_PRIME = "horarios_no_prime"
    PARTICIPACION_EVENTOS = "participacion_eventos"
    LINEAMIENTOS = "lineamientos"
    CLASES_FULL_HOUSE = "clases_full_house"
    COVERS = "covers"
    BRANDEOS = "brandeos"
    THEME_RIDES = "theme_rides"
    PUNTOS_PENALIZACION = "puntos_penalizacion"
    PAGO_WORKSHOPS = "pago_workshops"


@dataclass(frozen=True)
class HechosCumplimiento:
    """Hechos provistos por colaboradores externos; no se calculan aquí."""

    participacion_eventos: bool = False
    cumple_lineamientos: bool = True
    covers: int = 0
    brandeos: int = 0
    theme_rides: int = 0
    puntos_penalizacion: int = 0
    pago_workshops: Decimal = Decimal("0")


@dataclass(frozen=True)
class MetricasInstructor:
    """Snapshot de métricas de un instructor en un período."""

    instructor_id: int
    periodo_id: int
    ocupacion: Decimal
    clases: int
    locales: int
    dobleteos: int
    horarios_no_prime: int
    participacion_eventos: bool
    cumple_lineamientos: bool
    clases_full_house: int = 0
    covers: int = 0
    brandeos: int = 0
    theme_rides: int = 0
    puntos_penalizacion: int = 0
    pago_workshops: Decimal = Decimal("0")

    def valor(self, clave: str) -> Decimal | int | bool:
        """Valor de una métrica por clave (MetricaClave o RequisitoClave)."""
        clave = MetricaClave(getattr(clave, "value", clave))
        if clave == MetricaClave.LINEAMIENTOS:
            return self.cumple_lineamientos
        return getattr(self, clave.value)

    def como_dict(self) -> dict:
        return {
            "ocupacion": str(self.ocupacion),
            "clases": self.clases,
            "locales": self.locales,
            "dobleteos": self.dobleteos,
            "horarios_no_prime": self.horarios_no_prime,
            "participacion_eventos": self.participacion_eventos,
            "cumple_lineamientos": self.cumple_lineamientos,
            "clases_full_house": self.clases_full_house,
            "covers": self.covers,
            "brandeos": self.brandeos,
            "theme_rides": self.theme_rides,
            "puntos_penalizacion": self.puntos_penalizacion,
            "pago_workshops": str(self.pago_workshops),
        }
