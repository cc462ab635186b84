"""Entidades del cálculo y registro de pagos."""
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal

from pagos_instructores.domain.value_objects.estados import EstadoPago
from pagos_instructores.domain.value_objects.reajuste import Reajuste


@dataclass(frozen=True)
class DetalleClase:
    """Cálculo de una clase individual."""

    clase_id: int
    disciplina_id: int
    categoria: str
    estudio: str
    inicio: datetime
    cupos: int
    reservas: int
    tarifa: Decimal
    tipo_tarifa: str
    monto: Decimal
    es_full_house: bool
    numero_versus: int | None

    def como_dict(self) -> dict:
        return {
            "clase_id": self.clase_id,
            "disciplina_id": self.disciplina_id,
            "categoria": self.categoria,
            "estudio": self.estudio,
            "inicio": self.inicio.isoformat(),
            "cupos": self.cupos,
            "reservas": self.reservas,
            "tarifa": str(self.tarifa),
            "tipo_tarifa": self.tipo_tarifa,
            "monto": str(self.monto),
            "es_full_house": self.es_full_house,
            "numero_versus": self.numero_versus,
        }


@dataclass(frozen=True)
class ResultadoEvaluacion:
    """Salida del evaluador: montos sin redondear y log de términos."""

    monto_base: Decimal = Decimal("0")
    bonos: Decimal = Decimal("0")
    penalizaciones: Decimal = Decimal("0")
    log: tuple[str, ...] = ()
    detalle_clases: tuple[DetalleClase, ...] = ()

    def __add__(self, otro: "ResultadoEvaluacion") -> "ResultadoEvaluacion":
        return ResultadoEvaluacion(
            monto_base=self.monto_base + otro.monto_base,
            bonos=self.bonos + otro.bonos,
            penalizaciones=self.penalizaciones + otro.penalizaciones,
            log=self.log + otro.log,
            detalle_clases=self.detalle_clases + otro.detalle_clases,
        )

    @property
    def subtotal(self) -> Decimal:
        return self.monto_base + self.bonos - self.penalizaciones


@dataclass(frozen=True)
class Pago:
    """Pago de un instructor en un período."""

    instructor_id: int
    periodo_id: int
    monto_base: Decimal
    bonos: Decimal
    penalizaciones: Decimal
    reajuste: Reajuste
    monto_reajuste: Decimal
    subtotal_reajustado: Decimal
    retencion: Decimal
    pago_final: Decimal
    estado: EstadoPago = EstadoPago.PENDING
    log_calculo: tuple[str, ...] = ()
    detalle_clases: tuple[DetalleClase, ...] = ()
    comentarios: str | None = None
    id: int | None = None
    creado_en: datetime | None = None
    actualizado_en: datetime | None = None
    detalles: dict = field(default_factory=dict)

    def con_log(self, log: list[str] | tuple[str, ...]) -> "Pago":
        return replace(self, log_calculo=tuple(log))

    def desglose(self) -> dict:
        """Campos financieros, sin identificadores ni marcas de tiempo."""
        return {
            "monto_base": str(self.monto_base),
            "bonos": str(self.bonos),
            "penalizaciones": str(self.penalizaciones),
            "reajuste": str(self.reajuste.valor),
            "tipo_reajuste": self.reajuste.tipo.value,
            "monto_reajuste": str(self.monto_reajuste),
            "subtotal_reajustado": str(self.subtotal_reajustado),
            "retencion": str(self.retencion),
            "pago_final": str(self.pago_final),
            "estado": self.estado.value,
        }
