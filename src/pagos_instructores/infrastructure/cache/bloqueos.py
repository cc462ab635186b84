"""Implementaciones del bloqueo de recálculo."""
import asyncio

from pagos_instructores.application.ports.bloqueo import BloqueoRecalculo
from pagos_instructores.infrastructure.cache.redis_cache import RedisCache


class BloqueoRedis(BloqueoRecalculo):
    """Bloqueo distribuido con SET NX EX; el TTL evita bloqueos huérfanos."""

    def __init__(self, cache: RedisCache, ttl_segundos: int = 120, prefijo: str = "bloqueo"):
        self.cache = cache
        self.ttl_segundos = ttl_segundos
        self.prefijo = prefijo

    async def adquirir(self, clave: str) -> bool:
        return await self.cache.adquirir_bloqueo(f"{self.prefijo}:{clave}", self.ttl_segundos)

    async def liberar(self, clave: str) -> None:
        await self.cache.liberar_bloqueo(f"{self.prefijo}:{clave}")


class BloqueoLocal(BloqueoRecalculo):
    """Tabla de asyncio.Lock por clave; válida para un solo proceso."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    async def adquirir(self, clave: str) -> bool:
        lock = self._locks.setdefault(clave, asyncio.Lock())
        if lock.locked():
            return False
        await lock.acquire()
        return True

    async def liberar(self, clave: str) -> None:
        lock = self._locks.pop(clave, None)
        if lock is not None and lock.locked():
            lock.release()
