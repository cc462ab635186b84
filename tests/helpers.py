"""Datos de prueba compartidos."""
from datetime import datetime
from decimal import Decimal

from pagos_instructores.domain.entities.clase import Clase
from pagos_instructores.domain.services.agregador_metricas import AgregadorMetricas
from pagos_instructores.domain.services.clasificador_horario import ClasificadorHorario
from pagos_instructores.domain.value_objects.metricas import MetricasInstructor
from pagos_instructores.infrastructure.database.models import (
    CATEGORIA_POR_DEFECTO,
    ClaseModel,
    CumplimientoModel,
    DisciplinaModel,
    FormulaModel,
    InstructorModel,
    PagoModel,
    PeriodoModel,
    RequisitoCategoriaModel,
)

DISCIPLINA = 1

# Tarifa simple: 10 soles por reserva, 15 en full house
TERMINOS_BASE = [
    {
        "tipo": "tarifa",
        "nombre": "Tarifa general",
        "tramos": [{"hasta_reservas": 100, "tarifa": "10"}],
        "tarifa_full_house": "15",
    },
]

REQUISITOS = {
    "SENIOR_AMBASSADOR": {"ocupacion": "0.9", "clases": 40, "locales": 4},
    "AMBASSADOR": {
        "ocupacion": "0.75",
        "clases": 20,
        "dobleteos": 2,
        "horarios_no_prime": 2,
    },
    "JUNIOR_AMBASSADOR": {"ocupacion": "0.5", "clases": 10},
    "INSTRUCTOR": {},
}


def metricas(**valores) -> MetricasInstructor:
    base = {
        "instructor_id": 1,
        "periodo_id": 1,
        "ocupacion": Decimal("0"),
        "clases": 0,
        "locales": 0,
        "dobleteos": 0,
        "horarios_no_prime": 0,
        "participacion_eventos": False,
        "cumple_lineamientos": True,
    }
    base.update(valores)
    return MetricasInstructor(**base)


def clase(id: int, inicio: datetime, **valores) -> Clase:
    base = {
        "instructor_id": 1,
        "periodo_id": 1,
        "disciplina_id": DISCIPLINA,
        "estudio": "Siclo Reducto",
        "salon": "Sala 1",
        "cupos": 10,
        "reservas_totales": 8,
        "reservas_pagadas": 8,
    }
    base.update(valores)
    return Clase(id=id, inicio=inicio, **base)


def agregador() -> AgregadorMetricas:
    return AgregadorMetricas(ClasificadorHorario(), brecha_dobleteo_minutos=60)


async def crear_periodo(db, numero: int, anio: int = 2024, tenant_id: str = "default") -> int:
    periodo = PeriodoModel(numero=numero, anio=anio, tenant_id=tenant_id)
    db.add(periodo)
    await db.flush()
    return periodo.id


async def crear_disciplina(db, nombre: str = "Ciclismo") -> int:
    disciplina = DisciplinaModel(nombre=nombre, color="#ff0000")
    db.add(disciplina)
    await db.flush()
    return disciplina.id


async def crear_instructor(db, nombre: str = "Ana", activo: bool = True) -> int:
    instructor = InstructorModel(nombre=nombre, activo=activo)
    db.add(instructor)
    await db.flush()
    return instructor.id


async def crear_clase(
    db,
    instructor_id: int,
    periodo_id: int,
    disciplina_id: int,
    fecha: datetime,
    cupos: int = 10,
    reservas: int = 8,
    estudio: str = "Siclo Reducto",
    **valores,
) -> int:
    fila = ClaseModel(
        instructor_id=instructor_id,
        periodo_id=periodo_id,
        disciplina_id=disciplina_id,
        estudio=estudio,
        salon="Sala 1",
        fecha=fecha,
        cupos=cupos,
        reservas_totales=reservas,
        reservas_pagadas=reservas,
        **valores,
    )
    db.add(fila)
    await db.flush()
    return fila.id


async def crear_formula(
    db,
    periodo_id: int,
    disciplina_id: int,
    terminos: list[dict] | None = None,
    categoria: str | None = None,
) -> int:
    formula = FormulaModel(
        periodo_id=periodo_id,
        disciplina_id=disciplina_id,
        categoria=categoria or CATEGORIA_POR_DEFECTO,
        terminos=terminos if terminos is not None else TERMINOS_BASE,
    )
    db.add(formula)
    await db.flush()
    return formula.id


async def crear_requisitos(db, periodo_id: int, disciplina_id: int, requisitos: dict | None = None):
    for categoria, umbrales in (requisitos or REQUISITOS).items():
        db.add(
            RequisitoCategoriaModel(
                periodo_id=periodo_id,
                disciplina_id=disciplina_id,
                categoria=categoria,
                umbrales=umbrales,
            )
        )
    await db.flush()


async def crear_cumplimiento(db, instructor_id: int, periodo_id: int, **valores):
    db.add(CumplimientoModel(instructor_id=instructor_id, periodo_id=periodo_id, **valores))
    await db.flush()


async def crear_pago(db, instructor_id: int, periodo_id: int, estado: str = "PENDING", **valores) -> int:
    base = {
        "monto_base": Decimal("50.00"),
        "subtotal_reajustado": Decimal("50.00"),
        "retencion": Decimal("4.00"),
        "pago_final": Decimal("46.00"),
    }
    base.update(valores)
    pago = PagoModel(instructor_id=instructor_id, periodo_id=periodo_id, estado=estado, **base)
    db.add(pago)
    await db.flush()
    return pago.id


async def escenario_basico(db, clases: int = 2) -> dict:
    """Un instructor con clases, fórmula por defecto y requisitos en el período 3/2024."""
    periodo_id = await crear_periodo(db, 3)
    disciplina_id = await crear_disciplina(db)
    instructor_id = await crear_instructor(db)
    for i in range(clases):
        await crear_clase(
            db, instructor_id, periodo_id, disciplina_id, datetime(2024, 3, 4 + i, 19, 0)
        )
    await crear_formula(db, periodo_id, disciplina_id)
    await crear_requisitos(db, periodo_id, disciplina_id)
    await db.commit()
    return {
        "periodo_id": periodo_id,
        "disciplina_id": disciplina_id,
        "instructor_id": instructor_id,
    }
