"""Value Object para períodos de pago."""
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Periodo:
    """Período de pago identificado por (año, número)."""

    anio: int
    numero: int

    def __str__(self) -> str:
        return f"{self.numero}/{self.anio}"
