"""Servicio de dominio para reajuste y retención."""
from decimal import ROUND_HALF_UP, Decimal

from pagos_instructores.domain.entities.pago import Pago, ResultadoEvaluacion
from pagos_instructores.domain.value_objects.reajuste import Reajuste, TipoReajuste


class CalculadoraPagoFinal:
    """
    Aplica el reajuste y la retención al resultado del evaluador.

    Fórmula:
        subtotal = base + bonos - penalizaciones
        reajustado = subtotal + reajuste            (FIXED)
                   = subtotal × (1 + reajuste/100)  (PERCENTAGE)
        retención = round(reajustado × tasa, 2)
        pago final = reajustado - retención
    """

    TASA_RETENCION = Decimal("0.08")
    CENTIMOS = Decimal("0.01")

    @classmethod
    def redondear(cls, monto: Decimal) -> Decimal:
        return monto.quantize(cls.CENTIMOS, rounding=ROUND_HALF_UP)

    @staticmethod
    def monto_reajuste(subtotal: Decimal, reajuste: Reajuste) -> Decimal:
        if reajuste.tipo == TipoReajuste.PERCENTAGE:
            return subtotal * reajuste.valor / Decimal("100")
        return reajuste.valor

    @classmethod
    def aplicar(
        cls,
        evaluado: ResultadoEvaluacion,
        reajuste: Reajuste,
        tasa_retencion: Decimal | None = None,
        *,
        instructor_id: int,
        periodo_id: int,
    ) -> Pago:
        """
        Calcula el pago final.

        Args:
            evaluado: Resultado del evaluador (sin redondear)
            reajuste: Reajuste manual del pago
            tasa_retencion: Tasa de retención; 8% por defecto
            instructor_id: Instructor del pago
            periodo_id: Período del pago

        Returns:
            Pago con montos redondeados a céntimos y el log extendido
        """
        tasa = cls.TASA_RETENCION if tasa_retencion is None else Decimal(str(tasa_retencion))

        subtotal = evaluado.subtotal
        ajuste = cls.monto_reajuste(subtotal, reajuste)
        reajustado = cls.redondear(subtotal + ajuste)
        retencion = cls.redondear(reajustado * tasa)
        pago_final = reajustado - retencion

        log = list(evaluado.log)
        log.append(f"🧾 Subtotal (base + bonos - penalizaciones): S/ {cls.redondear(subtotal)}")
        if not reajuste.es_nulo:
            log.append(f"✏️ Reajuste {reajuste.describir()}: S/ {cls.redondear(ajuste)}")
        log.append(f"💰 Subtotal reajustado: S/ {reajustado}")
        log.append(f"🏛️ Retención ({(tasa * 100).normalize():f}%): S/ {retencion}")
        log.append(f"✅ Pago final: S/ {pago_final}")
        if pago_final < 0:
            log.append("⚠️ El pago final es negativo; revisar penalizaciones y reajuste")

        return Pago(
            instructor_id=instructor_id,
            periodo_id=periodo_id,
            monto_base=cls.redondear(evaluado.monto_base),
            bonos=cls.redondear(evaluado.bonos),
            penalizaciones=cls.redondear(evaluado.penalizaciones),
            reajuste=reajuste,
            monto_reajuste=cls.redondear(ajuste),
            subtotal_reajustado=reajustado,
            retencion=retencion,
            pago_final=pago_final,
            log_calculo=tuple(log),
            detalle_clases=evaluado.detalle_clases,
        )
