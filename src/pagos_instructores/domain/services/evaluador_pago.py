"""Servicio de dominio para evaluación de fórmulas de pago."""
from dataclasses import dataclass, field
from decimal import Decimal
from functools import singledispatch
from typing import Iterable

from pagos_instructores.domain.entities.clase import Clase
from pagos_instructores.domain.entities.formula import (
    Formula,
    ModoMonto,
    TerminoBono,
    TerminoPenalizacion,
    TerminoTarifa,
    a_decimal,
)
from pagos_instructores.domain.entities.pago import DetalleClase, ResultadoEvaluacion
from pagos_instructores.domain.exceptions import ErrorCalculo
from pagos_instructores.domain.value_objects.categoria import Categoria
from pagos_instructores.domain.value_objects.metricas import MetricasInstructor


@dataclass
class _Contexto:
    """Estado acumulado durante una evaluación."""

    metricas: MetricasInstructor
    categoria: Categoria
    pendientes: list[Clase]
    monto_base: Decimal = Decimal("0")
    bonos: Decimal = Decimal("0")
    penalizaciones: Decimal = Decimal("0")
    log: list[str] = field(default_factory=list)
    detalle: list[DetalleClase] = field(default_factory=list)


class EvaluadorPago:
    """
    Evalúa una fórmula contra las métricas y clases de un instructor.

    Orden de evaluación:
    1. Términos de tarifa, en orden; cada clase la toma el primer término
       cuyo filtro de estudio coincide
    2. Bonos y penalizaciones, en orden, cuando su condición se cumple

    Los montos no se redondean aquí.
    """

    @staticmethod
    def evaluar(
        formula: Formula,
        metricas: MetricasInstructor,
        clases: Iterable[Clase],
        categoria: Categoria,
    ) -> ResultadoEvaluacion:
        """
        Evalúa la fórmula.

        Raises:
            ErrorCalculo: si una clase no tiene tarifa aplicable o un
                término falla aritméticamente
        """
        ctx = _Contexto(
            metricas=metricas,
            categoria=categoria,
            pendientes=sorted(
                (
                    c for c in clases
                    if c.disciplina_id == formula.disciplina_id
                    and c.periodo_id == formula.periodo_id
                ),
                key=lambda c: (c.inicio, c.id),
            ),
        )
        ctx.log.append(
            f"🧮 Evaluando {formula.etiqueta} con categoría {categoria.value}"
            f" ({len(ctx.pendientes)} clases)"
        )

        for termino in formula.tarifas:
            _aplicar_seguro(termino, ctx)

        if ctx.pendientes:
            sin_tarifa = ", ".join(str(c.id) for c in ctx.pendientes)
            raise ErrorCalculo(
                f"Clases sin término de tarifa aplicable en {formula.etiqueta}: {sin_tarifa}"
            )

        for termino in formula.ajustes:
            _aplicar_seguro(termino, ctx)

        ctx.log.append(
            f"💰 Base: S/ {ctx.monto_base} | Bonos: S/ {ctx.bonos}"
            f" | Penalizaciones: S/ {ctx.penalizaciones}"
        )

        return ResultadoEvaluacion(
            monto_base=ctx.monto_base,
            bonos=ctx.bonos,
            penalizaciones=ctx.penalizaciones,
            log=tuple(ctx.log),
            detalle_clases=tuple(ctx.detalle),
        )


def _aplicar_seguro(termino, ctx: _Contexto) -> None:
    try:
        aplicar_termino(termino, ctx)
    except ErrorCalculo:
        raise
    except ArithmeticError as e:
        raise ErrorCalculo(f"Error aritmético en término '{termino.nombre}': {e}") from e


@singledispatch
def aplicar_termino(termino, ctx: _Contexto) -> None:
    """Aplica un término al contexto; cada tipo registra su implementación."""
    raise ErrorCalculo(f"Tipo de término no soportado: {type(termino).__name__}")


@aplicar_termino.register
def _(termino: TerminoTarifa, ctx: _Contexto) -> None:
    tomadas = [c for c in ctx.pendientes if termino.aplica_a(c)]
    ctx.pendientes = [c for c in ctx.pendientes if not termino.aplica_a(c)]

    for clase in tomadas:
        detalle = _calcular_clase(termino, clase, ctx.categoria)
        ctx.monto_base += detalle.monto
        ctx.detalle.append(detalle)
        versus = f" ÷ {clase.numero_versus} (versus)" if clase.es_versus else ""
        ctx.log.append(
            f"💵 [{termino.nombre}] clase {clase.id} {clase.estudio}"
            f" {clase.inicio:%Y-%m-%d %H:%M}: {detalle.reservas}/{clase.cupos} reservas"
            f" × S/ {detalle.tarifa} ({detalle.tipo_tarifa}){versus} = S/ {detalle.monto}"
        )


def _aplicar_ajuste(termino: TerminoBono | TerminoPenalizacion, ctx: _Contexto, signo: str) -> None:
    tipo = "Bono" if signo == "+" else "Penalización"

    if termino.condicion is not None and not termino.condicion.evaluar(ctx.metricas):
        ctx.log.append(
            f"⏭️ {tipo} '{termino.nombre}' no aplica: {termino.condicion.describir(ctx.metricas)}"
        )
        return

    unidades = Decimal("0")
    if termino.modo.usa_unidades:
        unidades = max(Decimal("0"), a_decimal(ctx.metricas.valor(termino.por)) - termino.sobre)

    if termino.modo == ModoMonto.POR_UNIDAD:
        monto = termino.monto * unidades
        detalle = f"{unidades} × S/ {termino.monto}"
    elif termino.modo == ModoMonto.PORCENTAJE_BASE:
        monto = ctx.monto_base * termino.monto / Decimal("100")
        detalle = f"{termino.monto}% de S/ {ctx.monto_base}"
    elif termino.modo == ModoMonto.PORCENTAJE_BASE_POR_UNIDAD:
        monto = ctx.monto_base * termino.monto * unidades / Decimal("100")
        detalle = f"{unidades} × {termino.monto}% de S/ {ctx.monto_base}"
    else:
        monto = termino.monto
        detalle = "monto fijo"

    if termino.modo.usa_unidades and termino.sobre:
        detalle += f", sobre {termino.sobre}"

    if termino.tope is not None:
        tope = (
            ctx.monto_base * termino.tope / Decimal("100")
            if termino.modo.es_porcentual
            else termino.tope
        )
        if monto > tope:
            monto = tope
            detalle += f", tope S/ {tope}"

    condicion = (
        f" [{termino.condicion.describir(ctx.metricas)}]" if termino.condicion else ""
    )
    ctx.log.append(f"{'🎁' if signo == '+' else '⚠️'} {tipo} '{termino.nombre}'{condicion}: {signo}S/ {monto} ({detalle})")

    if signo == "+":
        ctx.bonos += monto
    else:
        ctx.penalizaciones += monto


@aplicar_termino.register
def _(termino: TerminoBono, ctx: _Contexto) -> None:
    _aplicar_ajuste(termino, ctx, "+")


@aplicar_termino.register
def _(termino: TerminoPenalizacion, ctx: _Contexto) -> None:
    _aplicar_ajuste(termino, ctx, "-")


def _calcular_clase(termino: TerminoTarifa, clase: Clase, categoria: Categoria) -> DetalleClase:
    reservas = clase.reservas_para_tarifa
    cupos = clase.cupos

    if cupos > 0 and reservas >= cupos and termino.tarifa_full_house is not None:
        tarifa = termino.tarifa_full_house
        tipo_tarifa = "Full House"
    else:
        tramos = termino.tramos_ordenados()
        tramo = next((t for t in tramos if reservas <= t.hasta_reservas), None)
        if tramo is not None:
            tarifa = tramo.tarifa
            tipo_tarifa = f"Hasta {tramo.hasta_reservas} reservas"
        elif tramos:
            tarifa = tramos[-1].tarifa
            tipo_tarifa = "Tarifa máxima"
        else:
            raise ErrorCalculo(
                f"El término '{termino.nombre}' no tiene tarifa para la clase {clase.id}"
                f" ({reservas}/{cupos} reservas)"
            )

    monto = tarifa * reservas * termino.multiplicador + termino.cuota_fija

    if termino.minimo_garantizado is not None and monto < termino.minimo_garantizado:
        monto = termino.minimo_garantizado
    if termino.maximo is not None and monto > termino.maximo:
        monto = termino.maximo

    if clase.es_versus:
        monto = monto / clase.numero_versus

    return DetalleClase(
        clase_id=clase.id,
        disciplina_id=clase.disciplina_id,
        categoria=categoria.value,
        estudio=clase.estudio,
        inicio=clase.inicio,
        cupos=cupos,
        reservas=reservas,
        tarifa=tarifa,
        tipo_tarifa=tipo_tarifa,
        monto=monto,
        es_full_house=clase.es_full_house,
        numero_versus=clase.numero_versus,
    )
