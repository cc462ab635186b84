"""Servicio de caché y bloqueos con Redis."""
import json
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from pagos_instructores.infrastructure.config.logging import logger
from pagos_instructores.infrastructure.config.settings import get_settings


class RedisCache:
    """Gestor de caché con Redis."""

    def __init__(self, client: redis.Redis | None = None):
        self._client = client

    @property
    def disponible(self) -> bool:
        return self._client is not None

    async def initialize(self) -> None:
        """Inicializa conexión a Redis."""
        settings = get_settings()

        self._client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )

        # Verificar conexión; si falla se deja el cliente sin asignar
        try:
            await self._client.ping()
        except (RedisError, OSError):
            await self._client.aclose()
            self._client = None
            raise

    async def close(self) -> None:
        """Cierra conexión."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(self, key: str) -> Any | None:
        """Obtiene valor del caché."""
        if not self._client:
            return None

        try:
            value = await self._client.get(key)
            if value:
                return json.loads(value)
        except RedisError as e:
            logger.warning(f"Error obteniendo de caché {key}: {e}")

        return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """Guarda valor en caché."""
        if not self._client:
            return False

        try:
            settings = get_settings()
            ttl = ttl or settings.redis_ttl

            serialized = json.dumps(value, default=str)
            await self._client.setex(key, ttl, serialized)
            return True
        except RedisError as e:
            logger.warning(f"Error guardando en caché {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Elimina valor del caché."""
        if not self._client:
            return False

        try:
            await self._client.delete(key)
            return True
        except RedisError as e:
            logger.warning(f"Error eliminando de caché {key}: {e}")
            return False

    async def clear_pattern(self, pattern: str) -> int:
        """Elimina todas las keys que coincidan con el patrón."""
        if not self._client:
            return 0

        try:
            keys = []
            async for key in self._client.scan_iter(match=pattern):
                keys.append(key)

            if keys:
                return await self._client.delete(*keys)
            return 0
        except RedisError as e:
            logger.warning(f"Error limpiando patrón {pattern}: {e}")
            return 0

    async def adquirir_bloqueo(self, key: str, ttl: int) -> bool:
        """SET NX EX: True si el bloqueo quedó tomado por este llamador."""
        if not self._client:
            raise RuntimeError("Redis no inicializado")
        return bool(await self._client.set(key, "1", nx=True, ex=ttl))

    async def liberar_bloqueo(self, key: str) -> None:
        """Libera el bloqueo; el TTL lo expira si esto falla."""
        if not self._client:
            return
        try:
            await self._client.delete(key)
        except RedisError as e:
            logger.warning(f"No se pudo liberar el bloqueo {key}: {e}")


# Instancia global
redis_cache = RedisCache()
