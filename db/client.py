"""MongoDB connection held by an explicitly started Storage service."""
import os

import certifi
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from config import settings
from utils.logging import get_logger

logger = get_logger(__name__)

PROBLEMS = "problems"
NOTES = "notes"


class Storage:
    """Owns the MongoClient. Handlers only touch it once `ready` is True.

    Pass `client` to reuse an existing client (tests hand in a mongomock client).
    """

    def __init__(self, uri: str | None = None, db_name: str | None = None, client: MongoClient | None = None) -> None:
        self.uri = uri if uri is not None else settings.MONGODB_URI
        self.db_name = db_name or settings.MONGODB_DB
        self._client = client
        self._db: Database | None = None

    @property
    def ready(self) -> bool:
        return self._db is not None

    def connect(self) -> "Storage":
        if self.ready:
            return self
        if self._client is None:
            kwargs = {"serverSelectionTimeoutMS": 10000}
            if "mongodb+srv://" in self.uri:
                ca_path = certifi.where()
                os.environ.setdefault("SSL_CERT_FILE", ca_path)
                kwargs["tlsCAFile"] = ca_path
            self._client = MongoClient(self.uri, **kwargs)
            logger.info("MongoDB client created for db %s", self.db_name)
        db = self._client[self.db_name]
        ensure_indexes(db)
        self._db = db
        return self

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None

    @property
    def db(self) -> Database:
        if self._db is None:
            raise RuntimeError("Storage has not been connected")
        return self._db

    def collection(self, name: str) -> Collection:
        return self.db[name]


def ensure_indexes(db: Database) -> None:
    """One document per record; (user_id, id) is the record key."""
    db[PROBLEMS].create_index([("user_id", 1), ("id", 1)], unique=True)
    db[PROBLEMS].create_index([("user_id", 1), ("updatedAt", -1)])
    db[NOTES].create_index([("user_id", 1), ("id", 1)], unique=True)
    logger.info("MongoDB indexes ensured")
