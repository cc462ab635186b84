from datetime import datetime
from decimal import Decimal

import pytest

from helpers import clase, metricas
from pagos_instructores.domain.entities.formula import Formula
from pagos_instructores.domain.exceptions import ErrorCalculo, ErrorConfiguracion
from pagos_instructores.domain.services.evaluador_pago import EvaluadorPago
from pagos_instructores.domain.services.resolvedor_formula import ResolvedorFormula
from pagos_instructores.domain.value_objects.categoria import Categoria

TARIFA = {
    "tipo": "tarifa",
    "nombre": "Tarifa por reservas",
    "tramos": [
        {"hasta_reservas": 20, "tarifa": "12"},
        {"hasta_reservas": 5, "tarifa": "8"},
    ],
    "tarifa_full_house": "15",
}


def formula(*terminos, categoria=None, periodo_id=1, disciplina_id=1) -> Formula:
    return Formula.desde_dict(periodo_id, disciplina_id, categoria, list(terminos))


# ---------------------------------------------------------
# Selección de fórmula
# ---------------------------------------------------------
def test_prefiere_la_formula_de_la_categoria():
    por_defecto = formula(TARIFA)
    ambassador = formula(TARIFA, categoria=Categoria.AMBASSADOR)

    elegida = ResolvedorFormula.seleccionar([por_defecto, ambassador], 1, 1, Categoria.AMBASSADOR)

    assert elegida is ambassador


def test_cae_en_la_formula_por_defecto():
    por_defecto = formula(TARIFA)
    senior = formula(TARIFA, categoria=Categoria.SENIOR_AMBASSADOR)

    elegida = ResolvedorFormula.seleccionar([senior, por_defecto], 1, 1, Categoria.INSTRUCTOR)

    assert elegida is por_defecto


def test_no_busca_en_otros_periodos():
    otra = formula(TARIFA, periodo_id=2)

    with pytest.raises(ErrorConfiguracion) as exc:
        ResolvedorFormula.seleccionar([otra], 1, 1, Categoria.INSTRUCTOR)

    assert exc.value.clave == "1/1/INSTRUCTOR"


def test_termino_invalido_es_error_de_configuracion():
    with pytest.raises(ErrorConfiguracion):
        formula({"tipo": "bono", "nombre": "Covers", "monto": "5", "modo": "PER_UNIT"})

    with pytest.raises(ErrorConfiguracion):
        formula({"tipo": "descuento", "nombre": "x"})


def test_terminos_ida_y_vuelta():
    original = formula(
        TARIFA,
        {
            "tipo": "bono",
            "nombre": "Covers",
            "monto": "5",
            "modo": "PER_UNIT",
            "por": "covers",
            "condicion": {"metrica": "covers", "operador": ">", "valor": 0},
        },
    )

    copia = Formula.desde_dict(2, 1, None, original.terminos_como_dict())

    assert copia.terminos == original.terminos


# ---------------------------------------------------------
# Evaluación
# ---------------------------------------------------------
def test_tramo_segun_reservas():
    clases = [
        clase(1, datetime(2024, 3, 4, 19, 0), reservas_totales=4),
        clase(2, datetime(2024, 3, 5, 19, 0), reservas_totales=8),
    ]

    resultado = EvaluadorPago.evaluar(formula(TARIFA), metricas(), clases, Categoria.INSTRUCTOR)

    # Los tramos se ordenan: 4 reservas → 8, 8 reservas → 12
    assert resultado.monto_base == Decimal("128")
    assert [d.tipo_tarifa for d in resultado.detalle_clases] == [
        "Hasta 5 reservas",
        "Hasta 20 reservas",
    ]


def test_full_house_y_cover_full_house():
    clases = [
        clase(1, datetime(2024, 3, 4, 19, 0), cupos=10, reservas_totales=10),
        clase(2, datetime(2024, 3, 5, 19, 0), cupos=10, reservas_totales=3, texto_especial="full house"),
    ]

    resultado = EvaluadorPago.evaluar(formula(TARIFA), metricas(), clases, Categoria.INSTRUCTOR)

    assert resultado.monto_base == Decimal("300")
    assert all(d.tipo_tarifa == "Full House" for d in resultado.detalle_clases)


def test_sobre_el_ultimo_tramo_usa_tarifa_maxima():
    termino = {"tipo": "tarifa", "nombre": "T", "tramos": [{"hasta_reservas": 5, "tarifa": "8"}]}
    clases = [clase(1, datetime(2024, 3, 4, 19, 0), cupos=30, reservas_totales=12)]

    resultado = EvaluadorPago.evaluar(formula(termino), metricas(), clases, Categoria.INSTRUCTOR)

    assert resultado.monto_base == Decimal("96")
    assert resultado.detalle_clases[0].tipo_tarifa == "Tarifa máxima"


def test_cuota_minimo_maximo_y_versus():
    termino = {
        "tipo": "tarifa",
        "nombre": "T",
        "tramos": [{"hasta_reservas": 50, "tarifa": "10"}],
        "cuota_fija": "20",
        "minimo_garantizado": "60",
        "maximo": "150",
    }
    clases = [
        clase(1, datetime(2024, 3, 4, 19, 0), cupos=40, reservas_totales=2),  # 40 → mínimo 60
        clase(2, datetime(2024, 3, 5, 19, 0), cupos=40, reservas_totales=30),  # 320 → máximo 150
        clase(3, datetime(2024, 3, 6, 19, 0), cupos=40, reservas_totales=10, numero_versus=2),  # 120 / 2
    ]

    resultado = EvaluadorPago.evaluar(formula(termino), metricas(), clases, Categoria.INSTRUCTOR)

    assert [d.monto for d in resultado.detalle_clases] == [
        Decimal("60"),
        Decimal("150"),
        Decimal("60"),
    ]


def test_tarifa_por_estudio_y_clase_sin_tarifa():
    solo_reducto = dict(TARIFA, estudio="Reducto")
    clases = [
        clase(1, datetime(2024, 3, 4, 19, 0), estudio="Siclo Reducto"),
        clase(2, datetime(2024, 3, 5, 19, 0), estudio="Siclo San Isidro"),
    ]

    with pytest.raises(ErrorCalculo, match="Clases sin término de tarifa"):
        EvaluadorPago.evaluar(formula(solo_reducto), metricas(), clases, Categoria.INSTRUCTOR)

    resultado = EvaluadorPago.evaluar(
        formula(solo_reducto, dict(TARIFA, tramos=[{"hasta_reservas": 20, "tarifa": "5"}])),
        metricas(),
        clases,
        Categoria.INSTRUCTOR,
    )
    assert resultado.monto_base == Decimal("136")


def test_bonos_y_penalizaciones_condicionales():
    terminos = [
        TARIFA,
        {
            "tipo": "bono",
            "nombre": "Eventos",
            "monto": "50",
            "condicion": {"metrica": "participacion_eventos", "operador": "==", "valor": True},
        },
        {
            "tipo": "bono",
            "nombre": "Covers",
            "monto": "5",
            "modo": "PER_UNIT",
            "por": "covers",
        },
        {"tipo": "bono", "nombre": "Ocupación", "monto": "10", "modo": "PERCENTAGE_OF_BASE"},
        {
            "tipo": "penalizacion",
            "nombre": "Puntos",
            "monto": "3",
            "modo": "PER_UNIT",
            "por": "puntos_penalizacion",
            "condicion": {"metrica": "puntos_penalizacion", "operador": ">=", "valor": 1},
        },
        {
            "tipo": "penalizacion",
            "nombre": "Lineamientos",
            "monto": "100",
            "condicion": {"metrica": "lineamientos", "operador": "==", "valor": False},
        },
    ]
    snapshot = metricas(participacion_eventos=True, covers=2, puntos_penalizacion=4)
    clases = [clase(1, datetime(2024, 3, 4, 19, 0), reservas_totales=10, cupos=20)]

    resultado = EvaluadorPago.evaluar(formula(*terminos), snapshot, clases, Categoria.INSTRUCTOR)

    assert resultado.monto_base == Decimal("120")
    assert resultado.bonos == Decimal("72")  # 50 + 2×5 + 10% de 120
    assert resultado.penalizaciones == Decimal("12")
    assert resultado.subtotal == Decimal("180")
    assert any("⏭️ Penalización 'Lineamientos' no aplica" in linea for linea in resultado.log)


def test_solo_evalua_clases_de_la_disciplina():
    clases = [
        clase(1, datetime(2024, 3, 4, 19, 0), reservas_totales=4),
        clase(2, datetime(2024, 3, 5, 19, 0), reservas_totales=4, disciplina_id=2),
    ]

    resultado = EvaluadorPago.evaluar(formula(TARIFA), metricas(), clases, Categoria.INSTRUCTOR)

    assert [d.clase_id for d in resultado.detalle_clases] == [1]


def test_evaluacion_determinista():
    clases = [
        clase(2, datetime(2024, 3, 5, 19, 0)),
        clase(1, datetime(2024, 3, 4, 19, 0)),
    ]
    f = formula(TARIFA, {"tipo": "bono", "nombre": "Fijo", "monto": "7"})

    primero = EvaluadorPago.evaluar(f, metricas(), clases, Categoria.INSTRUCTOR)
    segundo = EvaluadorPago.evaluar(f, metricas(), list(reversed(clases)), Categoria.INSTRUCTOR)

    assert primero == segundo


@pytest.mark.parametrize(
    "puntos, esperado",
    [
        (5, Decimal("0")),  # bajo el umbral
        (14, Decimal("9.6")),  # (14 - 10) × 2% de 120
        (20, Decimal("12")),  # 20% limitado al 10% de 120
    ],
)
def test_puntos_de_penalizacion_sobre_umbral_con_tope(puntos, esperado):
    puntos_exceso = {
        "tipo": "penalizacion",
        "nombre": "Puntos",
        "monto": "2",
        "modo": "PERCENTAGE_OF_BASE_PER_UNIT",
        "por": "puntos_penalizacion",
        "sobre": 10,
        "tope": "10",
    }
    clases = [clase(1, datetime(2024, 3, 4, 19, 0), reservas_totales=10, cupos=20)]

    resultado = EvaluadorPago.evaluar(
        formula(TARIFA, puntos_exceso),
        metricas(puntos_penalizacion=puntos),
        clases,
        Categoria.INSTRUCTOR,
    )

    assert resultado.monto_base == Decimal("120")
    assert resultado.penalizaciones == esperado


def test_pago_de_workshops_se_suma_a_bonos():
    workshops = {
        "tipo": "bono",
        "nombre": "Workshops",
        "monto": "1",
        "modo": "PER_UNIT",
        "por": "pago_workshops",
    }
    clases = [clase(1, datetime(2024, 3, 4, 19, 0), reservas_totales=10, cupos=20)]

    resultado = EvaluadorPago.evaluar(
        formula(TARIFA, workshops),
        metricas(pago_workshops=Decimal("85.50")),
        clases,
        Categoria.INSTRUCTOR,
    )

    assert resultado.bonos == Decimal("85.50")


def test_tope_fijo_y_sobre_solo_en_modos_por_unidad():
    covers = {
        "tipo": "bono",
        "nombre": "Covers",
        "monto": "5",
        "modo": "PER_UNIT",
        "por": "covers",
        "tope": "12",
    }
    clases = [clase(1, datetime(2024, 3, 4, 19, 0), reservas_totales=10, cupos=20)]

    resultado = EvaluadorPago.evaluar(
        formula(TARIFA, covers), metricas(covers=4), clases, Categoria.INSTRUCTOR
    )
    assert resultado.bonos == Decimal("12")

    with pytest.raises(ErrorConfiguracion):
        formula({"tipo": "bono", "nombre": "Fijo", "monto": "5", "sobre": 2})
