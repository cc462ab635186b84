"""Value Object para reajustes manuales de pago."""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

# Misma escala que la columna `pagos.reajuste`
ESCALA_REAJUSTE = Decimal("0.0001")


class TipoReajuste(str, Enum):
    """Modo de aplicación del reajuste."""

    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"


@dataclass(frozen=True)
class Reajuste:
    """
    Reajuste firmado, fijo o porcentual.

    El valor se guarda a cuatro decimales; el cálculo usa ese mismo valor
    para que el pago persistido se reproduzca al recalcular.
    """

    valor: Decimal = Decimal("0")
    tipo: TipoReajuste = TipoReajuste.FIXED

    def __post_init__(self):
        valor = Decimal(self.valor).quantize(ESCALA_REAJUSTE, rounding=ROUND_HALF_UP)
        object.__setattr__(self, "valor", valor)

    @classmethod
    def ninguno(cls) -> "Reajuste":
        return cls()

    @property
    def es_nulo(self) -> bool:
        return self.valor == 0

    def describir(self) -> str:
        valor = f"{self.valor.normalize():+f}"
        if self.tipo == TipoReajuste.PERCENTAGE:
            return f"{valor}%"
        return f"S/ {valor}"
