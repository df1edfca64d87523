import argparse
import asyncio
import sys
import os

# Aggiungi backend/ alla PYTHONPATH per importare app.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from app.core.config import settings
from app.core.database import AsyncSessionLocal, engine
from app.models import Base
from app.services.auth_service import get_auth_service


async def reset(seed_admin: bool = True):
    print("Connessione al database, eliminazione tabelle...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        print("Tabelle eliminate. Creazione nuove tabelle...")
        await conn.run_sync(Base.metadata.create_all)

    if seed_admin and settings.bootstrap_admin_username and settings.bootstrap_admin_password:
        async with AsyncSessionLocal() as session:
            admin = await get_auth_service().ensure_admin(
                session,
                settings.bootstrap_admin_username,
                settings.bootstrap_admin_email or f"{settings.bootstrap_admin_username}@localhost",
                settings.bootstrap_admin_password,
            )
            await session.commit()
        if admin is not None:
            print(f"Amministratore creato: {admin.username}")
    else:
        print("Nessun amministratore configurato (BOOTSTRAP_ADMIN_*)")

    await engine.dispose()
    print("Database resettato con successo!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Elimina e ricrea tutte le tabelle del gestionale")
    parser.add_argument("--no-admin", action="store_true", help="Non creare l'amministratore iniziale")
    args = parser.parse_args()
    asyncio.run(reset(seed_admin=not args.no_admin))
