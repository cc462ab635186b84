"""Entidad de requisitos por categoría para un período y disciplina."""
from dataclasses import dataclass, field
from decimal import Decimal

from pagos_instructores.domain.exceptions import ErrorConfiguracion
from pagos_instructores.domain.value_objects.categoria import Categoria, RequisitoClave


Umbral = Decimal | int | bool


@dataclass(frozen=True)
class RequisitosCategoria:
    """
    Umbrales configurados por categoría.

    Solo las claves presentes se evalúan; una categoría ausente no es
    candidata durante la resolución automática.
    """

    periodo_id: int
    disciplina_id: int
    umbrales: dict[Categoria, dict[RequisitoClave, Umbral]] = field(default_factory=dict)

    @classmethod
    def desde_dict(
        cls,
        periodo_id: int,
        disciplina_id: int,
        data: dict[str, dict[str, object]],
    ) -> "RequisitosCategoria":
        """
        Construye y valida desde un dict con claves de texto.

        Raises:
            ErrorConfiguracion: si alguna categoría, clave o valor es inválido
        """
        umbrales: dict[Categoria, dict[RequisitoClave, Umbral]] = {}
        for nombre_categoria, requisitos in data.items():
            try:
                categoria = Categoria(nombre_categoria)
            except ValueError:
                raise ErrorConfiguracion(
                    f"Categoría desconocida en requisitos: {nombre_categoria}",
                    clave=f"{periodo_id}/{disciplina_id}/{nombre_categoria}",
                ) from None
            umbrales[categoria] = {}
            for nombre_clave, valor in (requisitos or {}).items():
                try:
                    clave = RequisitoClave(nombre_clave)
                except ValueError:
                    raise ErrorConfiguracion(
                        f"Requisito desconocido: {nombre_clave}",
                        clave=f"{periodo_id}/{disciplina_id}/{categoria.value}/{nombre_clave}",
                    ) from None
                umbrales[categoria][clave] = _validar_umbral(
                    clave, valor, f"{periodo_id}/{disciplina_id}/{categoria.value}"
                )
        return cls(periodo_id=periodo_id, disciplina_id=disciplina_id, umbrales=umbrales)

    def para(self, categoria: Categoria) -> dict[RequisitoClave, Umbral] | None:
        return self.umbrales.get(categoria)


def _validar_umbral(clave: RequisitoClave, valor: object, contexto: str) -> Umbral:
    ubicacion = f"{contexto}/{clave.value}"

    if clave.es_booleano:
        if not isinstance(valor, bool):
            raise ErrorConfiguracion(
                f"El requisito {clave.value} debe ser booleano, recibido {valor!r}",
                clave=ubicacion,
            )
        return valor

    if isinstance(valor, bool) or valor is None:
        raise ErrorConfiguracion(
            f"El requisito {clave.value} debe ser numérico, recibido {valor!r}",
            clave=ubicacion,
        )
    try:
        numero = Decimal(str(valor))
    except ArithmeticError:
        raise ErrorConfiguracion(
            f"El requisito {clave.value} no es un número válido: {valor!r}",
            clave=ubicacion,
        ) from None

    if not numero.is_finite() or numero < 0:
        raise ErrorConfiguracion(
            f"El requisito {clave.value} debe ser un número no negativo",
            clave=ubicacion,
        )
    if clave == RequisitoClave.OCUPACION:
        if numero > 1:
            raise ErrorConfiguracion(
                "La ocupación mínima se expresa como ratio entre 0 y 1",
                clave=ubicacion,
            )
        return numero
    return int(numero) if numero == numero.to_integral_value() else numero
