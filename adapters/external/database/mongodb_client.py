from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorClient

from config.settings import settings


def get_mongo_client() -> AsyncIOMotorClient:
    """
    Motor client for the configured MongoDB. Big integers go through the
    entities' own string encoding, so the client keeps BSON defaults.
    """
    return AsyncIOMotorClient(settings.MONGODB_URL, tz_aware=True)
