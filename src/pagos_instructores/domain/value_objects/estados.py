"""Estados de pagos y de ejecuciones de recálculo."""
from enum import Enum


class EstadoPago(str, Enum):
    """Estado de un pago persistido."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"

    @property
    def es_recalculable(self) -> bool:
        """Solo los pagos pendientes se reemplazan al recalcular."""
        return self == EstadoPago.PENDING


class EstadoRecalculo(str, Enum):
    """Máquina de estados de una ejecución de recálculo."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
