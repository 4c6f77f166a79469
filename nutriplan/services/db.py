# motor connection for the nutriplan api
# one client per process, opened in the app lifespan; routers reach collections via get_db

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from nutriplan.config import settings

logger = logging.getLogger(__name__)


class Database:
    """holds the motor client and exposes the practice collections"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """open the client once and ping the server"""
        if self.client is not None:
            return

        logger.info(f"Connecting to MongoDB database: {settings.MONGODB_DATABASE}")
        self.client = AsyncIOMotorClient(settings.MONGODB_URI)
        self.db = self.client[settings.MONGODB_DATABASE]
        await self.client.admin.command("ping")
        logger.info("MongoDB connection established")

    async def close(self):
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")

    # practitioners
    @property
    def users(self):
        return self.db["users"]

    # practitioner-owned records, all carry user_id
    @property
    def patients(self):
        return self.db["patients"]

    @property
    def assessments(self):
        return self.db["assessments"]

    @property
    def meals(self):
        return self.db["meals"]


db = Database()


async def get_db() -> Database:
    """fastapi dependency returning the shared Database"""
    return db
