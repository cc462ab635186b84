"""Servicio de dominio para selección de fórmulas."""
from typing import Iterable

from pagos_instructores.domain.entities.formula import Formula
from pagos_instructores.domain.exceptions import ErrorConfiguracion
from pagos_instructores.domain.value_objects.categoria import Categoria


class ResolvedorFormula:
    """
    Selecciona la fórmula aplicable.

    Precedencia: (período, disciplina, categoría) exacta, luego
    (período, disciplina, por defecto). Nunca se busca en otros períodos.
    """

    @staticmethod
    def seleccionar(
        formulas: Iterable[Formula],
        periodo_id: int,
        disciplina_id: int,
        categoria: Categoria,
    ) -> Formula:
        candidatas = [
            f for f in formulas
            if f.periodo_id == periodo_id and f.disciplina_id == disciplina_id
        ]

        for formula in candidatas:
            if formula.categoria == categoria:
                return formula

        for formula in candidatas:
            if formula.categoria is None:
                return formula

        raise ErrorConfiguracion(
            f"No existe fórmula para período {periodo_id}, disciplina {disciplina_id}"
            f" y categoría {categoria.value} (ni fórmula por defecto)",
            clave=f"{periodo_id}/{disciplina_id}/{categoria.value}",
        )
