"""Casos de uso de la aplicación."""
from pagos_instructores.application.use_cases.duplicar_formulas import DuplicarFormulas
from pagos_instructores.application.use_cases.gestionar_categorias import (
    AsignarCategoriaManual,
    LimpiarCategoriaManual,
    ObtenerCategoria,
)
from pagos_instructores.application.use_cases.recalcular_pago import (
    OverridesRecalculo,
    RecalcularPago,
)
from pagos_instructores.application.use_cases.recalcular_periodo import RecalcularPeriodo

__all__ = [
    "DuplicarFormulas",
    "AsignarCategoriaManual",
    "LimpiarCategoriaManual",
    "ObtenerCategoria",
    "OverridesRecalculo",
    "RecalcularPago",
    "RecalcularPeriodo",
]
