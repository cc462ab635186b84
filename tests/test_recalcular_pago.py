import asyncio
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from helpers import (
    TERMINOS_BASE,
    crear_clase,
    crear_cumplimiento,
    crear_formula,
    crear_instructor,
    crear_pago,
    crear_requisitos,
    escenario_basico,
)
from pagos_instructores.application.use_cases.recalcular_pago import OverridesRecalculo
from pagos_instructores.domain.value_objects.categoria import Categoria
from pagos_instructores.domain.value_objects.estados import EstadoRecalculo
from pagos_instructores.domain.value_objects.reajuste import Reajuste, TipoReajuste
from pagos_instructores.infrastructure.cache.bloqueos import BloqueoLocal
from pagos_instructores.infrastructure.config.settings import get_settings
from pagos_instructores.infrastructure.database.models import (
    AsignacionCategoriaModel,
    FormulaModel,
    PagoModel,
)
from pagos_instructores.infrastructure.database.repositories.pago_repository_impl import (
    PagoRepositoryImpl,
)
from pagos_instructores.interfaces.api.v1.deps import construir_recalculo


def recalculo(db, bloqueo=None):
    return construir_recalculo(db, "default", bloqueo or BloqueoLocal(), get_settings())


async def contar(db, modelo) -> int:
    return (await db.execute(select(func.count(modelo.id)))).scalar_one()


async def test_calcula_y_persiste(db):
    ids = await escenario_basico(db)

    resultado = await recalculo(db).execute(ids["instructor_id"], ids["periodo_id"])

    assert resultado.exito is True, resultado.logs
    assert resultado.estado == EstadoRecalculo.SUCCEEDED
    pago = resultado.pago
    # 2 clases × 8 reservas × S/ 10
    assert pago.monto_base == Decimal("160.00")
    assert pago.retencion == Decimal("12.80")
    assert pago.pago_final == Decimal("147.20")
    assert pago.comentarios == "Cálculo automático"
    assert len(pago.detalle_clases) == 2
    assert resultado.asignaciones[0].categoria == Categoria.INSTRUCTOR
    assert any(linea.startswith("✅ Pago final") for linea in pago.log_calculo)


async def test_recalculo_idempotente_sin_duplicados(db):
    ids = await escenario_basico(db)
    use_case = recalculo(db)

    primero = await use_case.execute(ids["instructor_id"], ids["periodo_id"])
    segundo = await use_case.execute(ids["instructor_id"], ids["periodo_id"])

    assert segundo.exito is True
    assert segundo.reemplazo_previo is True
    assert segundo.pago.id == primero.pago.id
    assert segundo.pago.desglose() == primero.pago.desglose()
    assert segundo.pago.log_calculo == primero.pago.log_calculo
    assert await contar(db, PagoModel) == 1
    assert await contar(db, AsignacionCategoriaModel) == 1


async def test_preserva_reajuste_y_comentarios(db):
    ids = await escenario_basico(db)
    await crear_pago(
        db,
        ids["instructor_id"],
        ids["periodo_id"],
        reajuste=Decimal("10"),
        tipo_reajuste="PERCENTAGE",
        comentarios="Revisado por finanzas",
    )
    await db.commit()

    resultado = await recalculo(db).execute(ids["instructor_id"], ids["periodo_id"])

    pago = resultado.pago
    assert pago.reajuste == Reajuste(Decimal("10.00"), TipoReajuste.PERCENTAGE)
    assert pago.subtotal_reajustado == Decimal("176.00")
    assert pago.comentarios == "Revisado por finanzas"
    assert await contar(db, PagoModel) == 1


async def test_reajuste_explicito_reemplaza_al_previo(db):
    ids = await escenario_basico(db)
    await crear_pago(db, ids["instructor_id"], ids["periodo_id"], reajuste=Decimal("99"))
    await db.commit()

    overrides = OverridesRecalculo(reajuste=Reajuste(Decimal("-10")))
    resultado = await recalculo(db).execute(ids["instructor_id"], ids["periodo_id"], overrides)

    assert resultado.pago.subtotal_reajustado == Decimal("150.00")


@pytest.mark.parametrize("estado", ["APPROVED", "PAID", "CANCELLED"])
async def test_pago_bloqueado_no_se_modifica(db, estado):
    ids = await escenario_basico(db)
    pago_id = await crear_pago(db, ids["instructor_id"], ids["periodo_id"], estado=estado)
    await db.commit()

    resultado = await recalculo(db).execute(ids["instructor_id"], ids["periodo_id"])

    assert resultado.exito is True
    assert resultado.omitido is True
    assert resultado.pago_id == pago_id
    assert resultado.pago.pago_final == Decimal("46.00")


async def test_categoria_manual_persistida_gana(db):
    ids = await escenario_basico(db)
    await crear_formula(
        db,
        ids["periodo_id"],
        ids["disciplina_id"],
        [{"tipo": "tarifa", "nombre": "Senior", "tramos": [{"hasta_reservas": 100, "tarifa": "20"}]}],
        categoria="SENIOR_AMBASSADOR",
    )
    db.add(
        AsignacionCategoriaModel(
            instructor_id=ids["instructor_id"],
            periodo_id=ids["periodo_id"],
            disciplina_id=ids["disciplina_id"],
            categoria="SENIOR_AMBASSADOR",
            manual=True,
            asignado_por="admin",
            criterios=[],
            evaluaciones=[],
        )
    )
    await db.commit()

    use_case = recalculo(db)
    await use_case.execute(ids["instructor_id"], ids["periodo_id"])
    resultado = await use_case.execute(ids["instructor_id"], ids["periodo_id"])

    asignacion = resultado.asignaciones[0]
    assert asignacion.categoria == Categoria.SENIOR_AMBASSADOR
    assert asignacion.manual is True
    assert resultado.pago.monto_base == Decimal("320.00")

    guardadas = await PagoRepositoryImpl(db).listar_asignaciones(
        ids["instructor_id"], ids["periodo_id"]
    )
    assert [(a.categoria, a.manual) for a in guardadas] == [(Categoria.SENIOR_AMBASSADOR, True)]


async def test_override_de_categoria(db):
    ids = await escenario_basico(db)

    overrides = OverridesRecalculo(
        categorias_manuales={ids["disciplina_id"]: Categoria.AMBASSADOR},
        asignado_por="coordinacion",
    )
    resultado = await recalculo(db).execute(ids["instructor_id"], ids["periodo_id"], overrides)

    asignacion = resultado.asignaciones[0]
    assert asignacion.categoria == Categoria.AMBASSADOR
    assert asignacion.asignado_por == "coordinacion"


async def test_asignacion_automatica_con_hechos_externos(db):
    ids = await escenario_basico(db, clases=0)
    # 10 clases en 2 estudios, 9/10 reservas, dos dobleteos y dos horarios no prime
    fechas = [
        (datetime(2024, 3, 4, 8, 0), "Siclo Reducto"),
        (datetime(2024, 3, 4, 9, 0), "Siclo Reducto"),
        (datetime(2024, 3, 5, 18, 0), "Siclo San Isidro"),
        (datetime(2024, 3, 5, 19, 0), "Siclo San Isidro"),
    ] + [(datetime(2024, 3, 10 + i, 20, 0), "Siclo Reducto") for i in range(16)]
    for fecha, estudio in fechas:
        await crear_clase(
            db, ids["instructor_id"], ids["periodo_id"], ids["disciplina_id"], fecha,
            reservas=9, estudio=estudio,
        )
    await crear_cumplimiento(db, ids["instructor_id"], ids["periodo_id"], participacion_eventos=True)
    await db.commit()

    resultado = await recalculo(db).execute(ids["instructor_id"], ids["periodo_id"])

    asignacion = resultado.asignaciones[0]
    assert asignacion.categoria == Categoria.AMBASSADOR
    assert asignacion.metricas.clases == 20
    assert asignacion.metricas.dobleteos == 2
    assert asignacion.metricas.horarios_no_prime == 2
    assert asignacion.metricas.participacion_eventos is True


async def test_sin_clases_falla_sin_tocar_nada(db):
    ids = await escenario_basico(db, clases=0)

    resultado = await recalculo(db).execute(ids["instructor_id"], ids["periodo_id"])

    assert resultado.exito is False
    assert resultado.estado == EstadoRecalculo.FAILED
    assert resultado.tipo_error == "ErrorValidacion"
    assert "No hay clases" in resultado.error
    assert await contar(db, PagoModel) == 0


async def test_instructor_o_periodo_inexistente(db):
    ids = await escenario_basico(db)

    sin_instructor = await recalculo(db).execute(999, ids["periodo_id"])
    sin_periodo = await recalculo(db).execute(ids["instructor_id"], 999)

    assert sin_instructor.tipo_error == "ErrorValidacion"
    assert sin_periodo.tipo_error == "ErrorValidacion"


async def test_fallo_de_formula_deja_el_pago_previo_intacto(db):
    ids = await escenario_basico(db)
    use_case = recalculo(db)
    previo = await use_case.execute(ids["instructor_id"], ids["periodo_id"])
    await db.commit()

    # Sin fórmulas para el período
    await db.execute(FormulaModel.__table__.delete())
    await db.commit()

    resultado = await use_case.execute(ids["instructor_id"], ids["periodo_id"])

    assert resultado.exito is False
    assert resultado.tipo_error == "ErrorConfiguracion"
    guardado = await PagoRepositoryImpl(db).obtener_pago(ids["instructor_id"], ids["periodo_id"])
    assert guardado.desglose() == previo.pago.desglose()


async def test_sin_requisitos_falla(db):
    ids = await escenario_basico(db)
    otro_instructor = await crear_instructor(db, "Beto")
    await crear_clase(
        db, otro_instructor, ids["periodo_id"], ids["disciplina_id"] + 1, datetime(2024, 3, 4, 7, 0)
    )
    await db.commit()

    resultado = await recalculo(db).execute(otro_instructor, ids["periodo_id"])

    assert resultado.exito is False
    assert resultado.tipo_error == "ErrorConfiguracion"


async def test_recalculo_concurrente_es_conflicto(db):
    ids = await escenario_basico(db)
    bloqueo = BloqueoLocal()
    use_case = recalculo(db, bloqueo)

    await bloqueo.adquirir(use_case.clave_bloqueo(ids["instructor_id"], ids["periodo_id"]))
    resultado = await use_case.execute(ids["instructor_id"], ids["periodo_id"])

    assert resultado.exito is False
    assert resultado.conflicto is True
    assert await contar(db, PagoModel) == 0


async def test_bloqueo_se_libera_tras_fallo(db):
    ids = await escenario_basico(db, clases=0)
    bloqueo = BloqueoLocal()
    use_case = recalculo(db, bloqueo)

    await use_case.execute(ids["instructor_id"], ids["periodo_id"])

    clave = use_case.clave_bloqueo(ids["instructor_id"], ids["periodo_id"])
    assert await bloqueo.adquirir(clave) is True


async def test_bloqueo_local_rechaza_segundo_intento():
    bloqueo = BloqueoLocal()

    assert await bloqueo.adquirir("x") is True
    assert await bloqueo.adquirir("x") is False
    await bloqueo.liberar("x")
    assert await asyncio.wait_for(bloqueo.adquirir("x"), timeout=1) is True


class BloqueoQueCuentaPagos(BloqueoLocal):
    """Al liberar, cuenta los pagos visibles desde otra sesión."""

    def __init__(self, sessionmaker):
        super().__init__()
        self.sessionmaker = sessionmaker
        self.pagos_al_liberar = None

    async def liberar(self, clave: str) -> None:
        async with self.sessionmaker() as otra:
            self.pagos_al_liberar = await contar(otra, PagoModel)
        await super().liberar(clave)


class PagoRepositoryDesfasado(PagoRepositoryImpl):
    """Repositorio que no ve el pago ya escrito por otra sesión."""

    async def _pago_row(self, instructor_id: int, periodo_id: int):
        return None


async def test_pago_confirmado_antes_de_liberar_el_bloqueo(db, sessionmaker):
    ids = await escenario_basico(db)
    bloqueo = BloqueoQueCuentaPagos(sessionmaker)

    resultado = await recalculo(db, bloqueo).execute(ids["instructor_id"], ids["periodo_id"])

    assert resultado.exito is True, resultado.logs
    assert bloqueo.pagos_al_liberar == 1


async def test_segunda_sesion_recalcula_tras_la_primera(db, sessionmaker):
    ids = await escenario_basico(db)
    bloqueo = BloqueoLocal()

    primero = await recalculo(db, bloqueo).execute(ids["instructor_id"], ids["periodo_id"])
    async with sessionmaker() as otra:
        segundo = await recalculo(otra, bloqueo).execute(ids["instructor_id"], ids["periodo_id"])
        assert await contar(otra, PagoModel) == 1

    assert primero.exito is True, primero.logs
    assert segundo.exito is True, segundo.logs
    assert segundo.reemplazo_previo is True
    assert segundo.pago_id == primero.pago_id


async def test_escritura_concurrente_del_mismo_pago_es_conflicto(db):
    ids = await escenario_basico(db)
    await crear_pago(db, ids["instructor_id"], ids["periodo_id"])
    await db.commit()
    use_case = recalculo(db)
    use_case.pago_repo = PagoRepositoryDesfasado(db)

    resultado = await use_case.execute(ids["instructor_id"], ids["periodo_id"])

    assert resultado.exito is False
    assert resultado.conflicto is True
    assert await contar(db, PagoModel) == 1
    guardado = await PagoRepositoryImpl(db).obtener_pago(ids["instructor_id"], ids["periodo_id"])
    assert guardado.pago_final == Decimal("46.00")


async def test_reajuste_con_decimales_se_reproduce_al_recalcular(db):
    ids = await escenario_basico(db)
    use_case = recalculo(db)
    overrides = OverridesRecalculo(
        reajuste=Reajuste(Decimal("10.125"), TipoReajuste.PERCENTAGE)
    )

    primero = await use_case.execute(ids["instructor_id"], ids["periodo_id"], overrides)
    segundo = await use_case.execute(ids["instructor_id"], ids["periodo_id"])

    # 160 × 1.10125
    assert primero.pago.subtotal_reajustado == Decimal("176.20")
    assert segundo.pago.reajuste == Reajuste(Decimal("10.125"), TipoReajuste.PERCENTAGE)
    assert segundo.pago.desglose() == primero.pago.desglose()
    assert segundo.pago.log_calculo == primero.pago.log_calculo


def test_reajuste_se_guarda_a_cuatro_decimales():
    assert Reajuste(Decimal("10.12345")).valor == Decimal("10.1235")
    assert Reajuste(Decimal("-2.5"), TipoReajuste.PERCENTAGE).describir() == "-2.5%"
    assert Reajuste(Decimal("100")).describir() == "S/ +100"


async def test_pago_de_workshops_desde_cumplimiento(db):
    ids = await escenario_basico(db)
    terminos = TERMINOS_BASE + [
        {"tipo": "bono", "nombre": "Workshops", "monto": "1", "modo": "PER_UNIT", "por": "pago_workshops"}
    ]
    await crear_formula(db, ids["periodo_id"], ids["disciplina_id"], terminos, categoria="INSTRUCTOR")
    await crear_cumplimiento(
        db, ids["instructor_id"], ids["periodo_id"], pago_workshops=Decimal("85.50")
    )
    await db.commit()

    resultado = await recalculo(db).execute(ids["instructor_id"], ids["periodo_id"])

    assert resultado.exito is True, resultado.logs
    # 160 + 85.50, menos 8%
    assert resultado.pago.bonos == Decimal("85.50")
    assert resultado.pago.pago_final == Decimal("225.86")
    guardadas = await PagoRepositoryImpl(db).listar_asignaciones(
        ids["instructor_id"], ids["periodo_id"]
    )
    assert guardadas[0].metricas.pago_workshops == Decimal("85.50")
