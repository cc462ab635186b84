"""Excepciones del dominio de pagos."""


class ErrorPagos(Exception):
    """Error base del motor de pagos."""


class ErrorConfiguracion(ErrorPagos):
    """Falta configuración (requisitos o fórmula) o es inválida."""

    def __init__(self, mensaje: str, clave: str | None = None):
        super().__init__(mensaje)
        self.clave = clave


class ErrorValidacion(ErrorPagos):
    """Entrada inválida; se rechaza antes de cualquier cambio de estado."""


class ErrorCalculo(ErrorPagos):
    """Fallo aritmético o de evaluación dentro de una fórmula."""


class ErrorConflicto(ErrorPagos):
    """Otra operación tiene tomada (o ya escribió) la misma clave."""
