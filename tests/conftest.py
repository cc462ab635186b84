import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from pagos_instructores.infrastructure.cache.bloqueos import BloqueoLocal
from pagos_instructores.infrastructure.database.connection import get_db_session
from pagos_instructores.infrastructure.database.models import Base

CAPACIDADES = {"X-Capacidades": "pagos:administrar"}


# ---------------------------------------------------------
# Base de datos: SQLite en archivo temporal (una por test)
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'pagos.db'}",
        poolclass=NullPool,
    )

    # pysqlite no emite BEGIN por sí mismo; sin esto los SAVEPOINT no aíslan nada
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
def sessionmaker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db(sessionmaker):
    """Sesión para preparar datos y verificar resultados."""
    async with sessionmaker() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------
# FastAPI app + override de la sesión
# ---------------------------------------------------------
@pytest.fixture()
def app(sessionmaker):
    from pagos_instructores.interfaces.api.main import app as fastapi_app

    async def _override_get_db():
        async with sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db_session] = _override_get_db
    fastapi_app.state.bloqueo = BloqueoLocal()
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers=CAPACIDADES,
    ) as ac:
        yield ac
