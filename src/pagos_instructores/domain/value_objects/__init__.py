"""Value Objects del dominio."""
from pagos_instructores.domain.value_objects.categoria import Categoria, RequisitoClave
from pagos_instructores.domain.value_objects.estados import EstadoPago, EstadoRecalculo
from pagos_instructores.domain.value_objects.metricas import (
    HechosCumplimiento,
    MetricaClave,
    MetricasInstructor,
)
from pagos_instructores.domain.value_objects.periodo import Periodo
from pagos_instructores.domain.value_objects.reajuste import Reajuste, TipoReajuste

__all__ = [
    "Categoria",
    "RequisitoClave",
    "EstadoPago",
    "EstadoRecalculo",
    "HechosCumplimiento",
    "MetricaClave",
    "MetricasInstructor",
    "Periodo",
    "Reajuste",
    "TipoReajuste",
]
