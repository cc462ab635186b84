"""Servicio de dominio para agregación de métricas de instructor."""
from decimal import Decimal
from typing import Iterable

import polars as pl

from pagos_instructores.domain.entities.clase import Clase
from pagos_instructores.domain.services.clasificador_horario import ClasificadorHorario
from pagos_instructores.domain.value_objects.metricas import (
    HechosCumplimiento,
    MetricasInstructor,
)


_ESQUEMA = {
    "estudio": pl.Utf8,
    "inicio": pl.Datetime("us"),
    "cupos": pl.Int64,
    "reservas_pagadas": pl.Int64,
    "no_prime": pl.Boolean,
    "full_house": pl.Boolean,
}


class AgregadorMetricas:
    """
    Calcula el snapshot de métricas de un instructor en un período.

    - Ocupación = reservas pagadas / cupos (0 si no hay cupos)
    - Locales = estudios distintos
    - Dobleteos = días con dos clases consecutivas separadas por
      `brecha_dobleteo_minutos` o menos
    - Horarios no prime según ClasificadorHorario
    """

    def __init__(
        self,
        clasificador: ClasificadorHorario,
        brecha_dobleteo_minutos: int = 60,
    ):
        self.clasificador = clasificador
        self.brecha_dobleteo_minutos = brecha_dobleteo_minutos

    def agregar(
        self,
        instructor_id: int,
        periodo_id: int,
        clases: Iterable[Clase],
        hechos: HechosCumplimiento | None = None,
    ) -> MetricasInstructor:
        """Agrega las clases del instructor en el período."""
        hechos = hechos or HechosCumplimiento()
        propias = [
            c for c in clases
            if c.instructor_id == instructor_id and c.periodo_id == periodo_id
        ]

        df = self._a_dataframe(propias)

        totales = df.select(
            pl.len().alias("clases"),
            pl.col("cupos").sum().alias("cupos"),
            pl.col("reservas_pagadas").sum().alias("reservas_pagadas"),
            pl.col("estudio").filter(pl.col("estudio") != "").n_unique().alias("locales"),
            pl.col("no_prime").sum().alias("no_prime"),
            pl.col("full_house").sum().alias("full_house"),
        ).row(0, named=True)

        cupos = totales["cupos"] or 0
        ocupacion = (
            Decimal(totales["reservas_pagadas"] or 0) / Decimal(cupos)
            if cupos > 0
            else Decimal("0")
        )

        return MetricasInstructor(
            instructor_id=instructor_id,
            periodo_id=periodo_id,
            ocupacion=ocupacion,
            clases=int(totales["clases"]),
            locales=int(totales["locales"]),
            dobleteos=self._contar_dobleteos(df),
            horarios_no_prime=int(totales["no_prime"] or 0),
            participacion_eventos=hechos.participacion_eventos,
            cumple_lineamientos=hechos.cumple_lineamientos,
            clases_full_house=int(totales["full_house"] or 0),
            covers=hechos.covers,
            brandeos=hechos.brandeos,
            theme_rides=hechos.theme_rides,
            puntos_penalizacion=hechos.puntos_penalizacion,
            pago_workshops=hechos.pago_workshops,
        )

    def _a_dataframe(self, clases: list[Clase]) -> pl.DataFrame:
        return pl.DataFrame(
            {
                "estudio": [c.estudio or "" for c in clases],
                # Hora local sin zona para agrupar por día calendario del estudio
                "inicio": [
                    self.clasificador.hora_local(c.inicio).replace(tzinfo=None)
                    for c in clases
                ],
                "cupos": [c.cupos for c in clases],
                "reservas_pagadas": [c.reservas_pagadas for c in clases],
                "no_prime": [
                    self.clasificador.es_clase_no_prime(c.estudio, c.inicio)
                    for c in clases
                ],
                "full_house": [c.es_full_house for c in clases],
            },
            schema=_ESQUEMA,
        )

    def _contar_dobleteos(self, df: pl.DataFrame) -> int:
        if df.height < 2:
            return 0

        dias = (
            df.sort("inicio")
            .with_columns(pl.col("inicio").dt.date().alias("dia"))
            .with_columns(pl.col("inicio").diff().over("dia").alias("brecha"))
            .filter(pl.col("brecha") <= pl.duration(minutes=self.brecha_dobleteo_minutos))
            .select(pl.col("dia").n_unique())
            .item()
        )
        return int(dias)
