"""Entidad de clase dictada."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Clase:
    """Clase de un instructor en un período (solo lectura)."""

    id: int
    instructor_id: int
    periodo_id: int
    disciplina_id: int
    estudio: str
    salon: str
    inicio: datetime
    cupos: int
    reservas_totales: int
    reservas_pagadas: int
    texto_especial: str | None = None
    numero_versus: int | None = None

    @property
    def full_house_por_cover(self) -> bool:
        """Un cover marcado como full house fuerza 100% de ocupación."""
        return "full house" in (self.texto_especial or "").lower()

    @property
    def reservas_para_tarifa(self) -> int:
        if self.full_house_por_cover:
            return self.cupos
        return self.reservas_totales

    @property
    def es_full_house(self) -> bool:
        return self.full_house_por_cover or (
            self.cupos > 0 and self.reservas_totales >= self.cupos
        )

    @property
    def es_versus(self) -> bool:
        return bool(self.numero_versus and self.numero_versus > 1)
