import asyncio
import sys
import os

# Aggiungi backend/ alla PYTHONPATH per importare bengkel.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from bengkel.core.database import engine
from bengkel.models import Base


async def reset():
    print("Connessione al database, eliminazione tabelle bengkel...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        print(f"Eliminate {len(Base.metadata.tables)} tabelle. Creazione schema...")
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("Database resettato con successo!")


if __name__ == "__main__":
    asyncio.run(reset())
