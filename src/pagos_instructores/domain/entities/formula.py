"""Entidad de fórmula de pago y sus términos tipados."""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
import operator

from pagos_instructores.domain.entities.clase import Clase
from pagos_instructores.domain.exceptions import ErrorConfiguracion
from pagos_instructores.domain.value_objects.categoria import Categoria
from pagos_instructores.domain.value_objects.metricas import MetricaClave, MetricasInstructor


class Operador(str, Enum):
    """Operadores de comparación para condiciones."""

    GTE = ">="
    GT = ">"
    LTE = "<="
    LT = "<"
    EQ = "=="

    def aplicar(self, izquierda: Decimal, derecha: Decimal) -> bool:
        funciones = {
            Operador.GTE: operator.ge,
            Operador.GT: operator.gt,
            Operador.LTE: operator.le,
            Operador.LT: operator.lt,
            Operador.EQ: operator.eq,
        }
        return funciones[self](izquierda, derecha)


class ModoMonto(str, Enum):
    """
    Cómo se obtiene el monto de un bono o penalización.

    En los modos por unidad, `sobre` se descuenta de las unidades (mínimo 0).
    `tope` limita el monto; en los modos porcentuales se expresa como % del base.
    """

    FIJO = "FIXED"
    POR_UNIDAD = "PER_UNIT"  # monto × unidades de la métrica `por`
    PORCENTAJE_BASE = "PERCENTAGE_OF_BASE"  # monto% del monto base
    PORCENTAJE_BASE_POR_UNIDAD = "PERCENTAGE_OF_BASE_PER_UNIT"  # monto% del base por unidad

    @property
    def usa_unidades(self) -> bool:
        return self in (ModoMonto.POR_UNIDAD, ModoMonto.PORCENTAJE_BASE_POR_UNIDAD)

    @property
    def es_porcentual(self) -> bool:
        return self in (ModoMonto.PORCENTAJE_BASE, ModoMonto.PORCENTAJE_BASE_POR_UNIDAD)


def a_decimal(valor: Decimal | int | bool | str | float) -> Decimal:
    """Convierte métricas y parámetros a Decimal sin pasar por binario."""
    if isinstance(valor, bool):
        return Decimal(int(valor))
    if isinstance(valor, Decimal):
        return valor
    return Decimal(str(valor))


@dataclass(frozen=True)
class Condicion:
    """Predicado sobre una métrica del snapshot."""

    metrica: MetricaClave
    operador: Operador
    valor: Decimal | int | bool

    def evaluar(self, metricas: MetricasInstructor) -> bool:
        actual = a_decimal(metricas.valor(self.metrica))
        return self.operador.aplicar(actual, a_decimal(self.valor))

    def describir(self, metricas: MetricasInstructor) -> str:
        actual = metricas.valor(self.metrica)
        return f"{self.metrica.value} {self.operador.value} {self.valor} (actual: {actual})"


@dataclass(frozen=True)
class TramoTarifa:
    """Tarifa por reserva aplicable hasta `hasta_reservas` reservas."""

    hasta_reservas: int
    tarifa: Decimal


@dataclass(frozen=True)
class TerminoTarifa:
    """Término de tarifa por clase."""

    nombre: str
    tramos: tuple[TramoTarifa, ...] = ()
    tarifa_full_house: Decimal | None = None
    cuota_fija: Decimal = Decimal("0")
    minimo_garantizado: Decimal | None = None
    maximo: Decimal | None = None
    multiplicador: Decimal = Decimal("1")
    estudio: str | None = None

    def aplica_a(self, clase: Clase) -> bool:
        if not self.estudio:
            return True
        return self.estudio.lower() in clase.estudio.lower()

    def tramos_ordenados(self) -> tuple[TramoTarifa, ...]:
        return tuple(sorted(self.tramos, key=lambda t: t.hasta_reservas))


@dataclass(frozen=True)
class TerminoBono:
    """Bono aditivo; se aplica cuando la condición se cumple."""

    nombre: str
    monto: Decimal
    modo: ModoMonto = ModoMonto.FIJO
    condicion: Condicion | None = None
    por: MetricaClave | None = None
    sobre: Decimal = Decimal("0")
    tope: Decimal | None = None


@dataclass(frozen=True)
class TerminoPenalizacion:
    """Penalización sustractiva; se aplica cuando la condición se cumple."""

    nombre: str
    monto: Decimal
    modo: ModoMonto = ModoMonto.FIJO
    condicion: Condicion | None = None
    por: MetricaClave | None = None
    sobre: Decimal = Decimal("0")
    tope: Decimal | None = None


Termino = TerminoTarifa | TerminoBono | TerminoPenalizacion


@dataclass(frozen=True)
class Formula:
    """Conjunto ordenado de términos para (período, disciplina, categoría)."""

    periodo_id: int
    disciplina_id: int
    categoria: Categoria | None  # None = fórmula por defecto de la disciplina
    terminos: tuple[Termino, ...]
    id: int | None = None

    @property
    def tarifas(self) -> tuple[TerminoTarifa, ...]:
        return tuple(t for t in self.terminos if isinstance(t, TerminoTarifa))

    @property
    def ajustes(self) -> tuple[TerminoBono | TerminoPenalizacion, ...]:
        return tuple(t for t in self.terminos if not isinstance(t, TerminoTarifa))

    @property
    def etiqueta(self) -> str:
        categoria = self.categoria.value if self.categoria else "DEFAULT"
        return f"fórmula {self.periodo_id}/{self.disciplina_id}/{categoria}"

    def terminos_como_dict(self) -> list[dict]:
        return [_termino_a_dict(t) for t in self.terminos]

    @classmethod
    def desde_dict(
        cls,
        periodo_id: int,
        disciplina_id: int,
        categoria: Categoria | None,
        terminos: list[dict],
        id: int | None = None,
    ) -> "Formula":
        """
        Construye una fórmula desde su representación JSON.

        Raises:
            ErrorConfiguracion: si algún término es inválido
        """
        contexto = f"{periodo_id}/{disciplina_id}/{categoria.value if categoria else 'DEFAULT'}"
        try:
            parsed = tuple(_termino_desde_dict(t) for t in terminos)
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            raise ErrorConfiguracion(
                f"Término de fórmula inválido en {contexto}: {e}", clave=contexto
            ) from e
        return cls(
            periodo_id=periodo_id,
            disciplina_id=disciplina_id,
            categoria=categoria,
            terminos=parsed,
            id=id,
        )


def _opcional_decimal(valor) -> Decimal | None:
    return None if valor is None else a_decimal(valor)


def _condicion_desde_dict(data: dict | None) -> Condicion | None:
    if not data:
        return None
    valor = data["valor"]
    return Condicion(
        metrica=MetricaClave(data["metrica"]),
        operador=Operador(data["operador"]),
        valor=valor if isinstance(valor, bool) else a_decimal(valor),
    )


def _termino_desde_dict(data: dict) -> Termino:
    tipo = data["tipo"]

    if tipo == "tarifa":
        return TerminoTarifa(
            nombre=data.get("nombre", "Tarifa"),
            tramos=tuple(
                TramoTarifa(hasta_reservas=int(t["hasta_reservas"]), tarifa=a_decimal(t["tarifa"]))
                for t in data.get("tramos", [])
            ),
            tarifa_full_house=_opcional_decimal(data.get("tarifa_full_house")),
            cuota_fija=a_decimal(data.get("cuota_fija", 0)),
            minimo_garantizado=_opcional_decimal(data.get("minimo_garantizado")),
            maximo=_opcional_decimal(data.get("maximo")),
            multiplicador=a_decimal(data.get("multiplicador", 1)),
            estudio=data.get("estudio"),
        )

    if tipo in ("bono", "penalizacion"):
        modo = ModoMonto(data.get("modo", ModoMonto.FIJO.value))
        por = MetricaClave(data["por"]) if data.get("por") else None
        if modo.usa_unidades and por is None:
            raise ValueError(f"'{data.get('nombre')}' usa {modo.value} sin métrica 'por'")
        sobre = a_decimal(data.get("sobre", 0))
        if sobre and not modo.usa_unidades:
            raise ValueError(f"'{data.get('nombre')}' usa 'sobre' con modo {modo.value}")
        clase_termino = TerminoBono if tipo == "bono" else TerminoPenalizacion
        return clase_termino(
            nombre=data["nombre"],
            monto=a_decimal(data["monto"]),
            modo=modo,
            condicion=_condicion_desde_dict(data.get("condicion")),
            por=por,
            sobre=sobre,
            tope=_opcional_decimal(data.get("tope")),
        )

    raise ValueError(f"tipo de término desconocido: {tipo!r}")


def _condicion_a_dict(condicion: Condicion | None) -> dict | None:
    if condicion is None:
        return None
    valor = condicion.valor
    return {
        "metrica": condicion.metrica.value,
        "operador": condicion.operador.value,
        "valor": valor if isinstance(valor, bool) else str(valor),
    }


def _termino_a_dict(termino: Termino) -> dict:
    if isinstance(termino, TerminoTarifa):
        return {
            "tipo": "tarifa",
            "nombre": termino.nombre,
            "tramos": [
                {"hasta_reservas": t.hasta_reservas, "tarifa": str(t.tarifa)}
                for t in termino.tramos
            ],
            "tarifa_full_house": _str_o_none(termino.tarifa_full_house),
            "cuota_fija": str(termino.cuota_fija),
            "minimo_garantizado": _str_o_none(termino.minimo_garantizado),
            "maximo": _str_o_none(termino.maximo),
            "multiplicador": str(termino.multiplicador),
            "estudio": termino.estudio,
        }
    return {
        "tipo": "bono" if isinstance(termino, TerminoBono) else "penalizacion",
        "nombre": termino.nombre,
        "monto": str(termino.monto),
        "modo": termino.modo.value,
        "condicion": _condicion_a_dict(termino.condicion),
        "por": termino.por.value if termino.por else None,
        "sobre": str(termino.sobre),
        "tope": _str_o_none(termino.tope),
    }


def _str_o_none(valor: Decimal | None) -> str | None:
    return None if valor is None else str(valor)
