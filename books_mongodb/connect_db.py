# connect_db.py - MongoClient construction from environment settings
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

load_dotenv()

logger = logging.getLogger(__name__)

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "library")
BOOKS_COLLECTION = os.getenv("BOOKS_COLLECTION", "books")

_client: Optional[MongoClient] = None


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def get_client(uri: Optional[str] = None) -> MongoClient:
    """Return the process-wide MongoClient, creating it on first use.

    TLS is off unless MONGO_TLS is set; MONGO_TLS_ALLOW_INVALID relaxes
    certificate checks for hosted clusters with self-signed certs.
    """
    global _client
    if _client is None:
        options = {
            "serverSelectionTimeoutMS": int(os.getenv("MONGO_TIMEOUT_MS", "5000")),
        }
        if _env_flag("MONGO_TLS"):
            options["tls"] = True
            options["tlsAllowInvalidCertificates"] = _env_flag("MONGO_TLS_ALLOW_INVALID")
        _client = MongoClient(uri or MONGO_URI, **options)
    return _client


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


def get_database(db_name: Optional[str] = None, ping: bool = True) -> Database:
    name = db_name or DB_NAME
    try:
        client = get_client()
        if ping:
            # Test the connection
            client.admin.command("ping")
        db = client[name]
        logger.info("Connected to MongoDB database: %s", name)
        return db
    except Exception as e:
        logger.error("Failed to connect to MongoDB: %s", e)
        raise


def get_books_collection(db: Optional[Database] = None, ping: bool = True) -> Collection:
    if db is None:
        db = get_database(ping=ping)
    return db[BOOKS_COLLECTION]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    get_database()
