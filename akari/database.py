"""
🔌 Database Connection Setup - MongoDB Atlas

Configuración centralizada para conectar a MongoDB Atlas
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)

from akari.core.config import get_settings

logger = logging.getLogger(__name__)


class Database:
    """Dueño del cliente de MongoDB (se abre y cierra en el lifespan de la app)"""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect(cls):
        """Conecta a MongoDB Atlas"""
        if cls.client is None:
            settings = get_settings()

            cls.client = AsyncIOMotorClient(
                settings.mongodb_uri,
                maxPoolSize=10,
                minPoolSize=2,
            )
            cls.db = cls.client[settings.mongodb_db_name]

            # Test de conexión
            await cls.client.admin.command("ping")
            logger.info(f"✅ Connected to MongoDB Atlas: {settings.mongodb_db_name}")

    @classmethod
    async def disconnect(cls):
        """Cierra la conexión"""
        if cls.client is not None:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("❌ Disconnected from MongoDB")

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Retorna la instancia de la base de datos"""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db


def to_mongo_datetime(value: datetime) -> datetime:
    """
    Datetime naive en UTC, igual que los devuelve PyMongo.

    Mongo guarda UTC sin zona horaria; normalizar antes de comparar evita
    mezclar datetimes naive y aware.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ============================================
# 🎯 DEPENDENCY para FastAPI
# ============================================

async def get_database() -> AsyncIOMotorDatabase:
    """
    FastAPI dependency para inyectar la DB

    Uso:
        @router.get("/predictions/{prediction_id}")
        async def get_prediction(prediction_id: str, db: Database):
            service = PredictionService(db)
            return await service.get_prediction(prediction_id)
    """
    return Database.get_db()


# ============================================
# 🔒 TRANSACCIONES
# ============================================

@asynccontextmanager
async def start_transaction(
    db: AsyncIOMotorDatabase,
) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
    """
    Abre una sesión con transacción multi-documento sobre el cliente de `db`.

    Todo lo escrito con la sesión se confirma al salir del bloque, o se
    descarta si el bloque lanza una excepción. Con `mongodb_transactions`
    desactivado entrega None y cada escritura es independiente (las
    actualizaciones condicionales siguen evitando dobles resoluciones).

    Uso:
        async with start_transaction(db) as session:
            await repo.mark_resolved(..., session=session)
            await ledger.apply_points_delta(..., session=session)
    """
    if not get_settings().mongodb_transactions:
        yield None
        return

    async with await db.client.start_session() as session:
        async with session.start_transaction():
            yield session


# ============================================
# 🏗️ CREAR ÍNDICES (run once al deployment)
# ============================================

async def create_indexes():
    """
    Crea los índices necesarios para optimizar queries

    Llamar una vez al hacer deploy o en un script de inicialización
    """
    db = Database.get_db()

    # Índices para users
    await db.users.create_index("telegram_id", unique=True)
    await db.users.create_index([("points", -1)])

    # Índices para predictions
    await db.predictions.create_index([("resolved", 1), ("ends_at", 1)])
    await db.predictions.create_index([("created_at", -1)])

    # Índices para bets (una apuesta por usuario y predicción)
    await db.bets.create_index([("prediction_id", 1), ("user_id", 1)], unique=True)
    await db.bets.create_index([("prediction_id", 1), ("option", 1)])

    # Índices para rewards
    await db.rewards.create_index([("user_id", 1), ("status", 1)])

    # Ledger de MYST
    await db.myst_transactions.create_index([("user_id", 1), ("created_at", -1)])

    # Campañas y completions
    await db.campaigns.create_index([("is_active", 1), ("ends_at", 1)])
    await db.task_completions.create_index(
        [("campaign_id", 1), ("task_id", 1), ("user_id", 1)], unique=True
    )
    await db.task_completions.create_index("campaign_id")

    logger.info("✅ Indexes created successfully")
