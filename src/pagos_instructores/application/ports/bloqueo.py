"""Puerto (interfaz) para exclusión mutua de recálculos."""
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

from pagos_instructores.domain.exceptions import ErrorConflicto


class BloqueoRecalculo(ABC):
    """Bloqueo por clave; un segundo intento se rechaza como conflicto."""

    @abstractmethod
    async def adquirir(self, clave: str) -> bool:
        """Intenta tomar el bloqueo sin esperar."""
        pass

    @abstractmethod
    async def liberar(self, clave: str) -> None:
        """Libera el bloqueo."""
        pass

    @asynccontextmanager
    async def mantener(self, clave: str) -> AsyncIterator[None]:
        """
        Mantiene el bloqueo durante el bloque.

        Raises:
            ErrorConflicto: si la clave ya está bloqueada
        """
        if not await self.adquirir(clave):
            raise ErrorConflicto(f"Ya existe una operación en curso para {clave}; reintente")
        try:
            yield
        finally:
            await self.liberar(clave)
