"""
Accesso al database (SQLAlchemy 2.0 async + asyncpg)
Progetto: Bengkel Manager (Gestionale Officina)

Una AsyncSession per richiesta HTTP. Le sessioni non scadono gli oggetti
al commit: dopo create/replace di una fattura il router rilegge il
dettaglio con una query esplicita.
"""

import logging
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from bengkel.core.config import settings

logger = logging.getLogger(__name__)


def _create_engine() -> AsyncEngine:
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


engine: AsyncEngine = _create_engine()

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency FastAPI: sessione per la durata della richiesta.

    Un'eccezione non gestita annulla le scritture non ancora committate.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def ping_db() -> bool:
    """True se il database risponde a una query banale."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True


async def init_db() -> None:
    """Verifica all'avvio che il database sia raggiungibile."""
    try:
        await ping_db()
    except Exception as e:
        logger.error(f"Database non raggiungibile ({settings.database_url.split('@')[-1]}): {e}")
        raise
    logger.info("Database raggiungibile")


async def close_db() -> None:
    await engine.dispose()
    logger.info("Pool di connessioni chiuso")
