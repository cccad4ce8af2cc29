from pymongo import MongoClient, ReplaceOne
from pymongo.database import Database as MongoDatabase
from pymongo.errors import ConnectionFailure, DuplicateKeyError, ServerSelectionTimeoutError, PyMongoError
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple
from routinesense.core.config import settings
from routinesense.core.exceptions import RemoteStoreError
import logging
import certifi
import time

logger = logging.getLogger(__name__)

ROUTINES = "user_routines"
VERSIONS = "routine_versions"
USAGE_EVENTS = "routine_usage_events"
NOTES = "routine_notes"
SKIN_PROFILES = "skin_profiles"

class Database:
    client: MongoClient = None
    database = None

db = Database()

def _extract_database_name(url: str, default_name: str) -> str:
    """Extract database name from MongoDB URL or use default"""
    try:
        url_without_params = url.split("?")[0]
        parts = url_without_params.split("/")
        if len(parts) > 3 and parts[-1] and parts[-1] != "test":
            return parts[-1]
        return default_name
    except Exception as e:
        logger.warning(f"Error extracting database name: {e}, using default: {default_name}")
        return default_name

def get_database():
    """Get database instance"""
    return db.database

def connect_to_mongo():
    """Create database connection, retrying a few times at startup"""
    max_retries = 3
    retry_delay = 2

    for attempt in range(max_retries):
        try:
            logger.info(f"Connecting to MongoDB (attempt {attempt + 1}/{max_retries})...")

            if "mongodb+srv://" in settings.MONGODB_URL:
                logger.info("Detected MongoDB Atlas connection")
                db.client = MongoClient(
                    settings.MONGODB_URL,
                    serverSelectionTimeoutMS=15000,
                    connectTimeoutMS=30000,
                    socketTimeoutMS=30000,
                    maxPoolSize=50,
                    retryWrites=True,
                    w='majority',
                    tls=True,
                    tlsCAFile=certifi.where()
                )
            else:
                logger.info("Detected local MongoDB connection")
                db.client = MongoClient(
                    settings.MONGODB_URL,
                    serverSelectionTimeoutMS=5000,
                    connectTimeoutMS=10000,
                    socketTimeoutMS=10000,
                    maxPoolSize=20
                )

            database_name = _extract_database_name(settings.MONGODB_URL, settings.DATABASE_NAME)
            logger.info(f"Using database: {database_name}")
            db.database = db.client[database_name]

            db.client.admin.command('ping', maxTimeMS=5000)
            logger.info("Connected to MongoDB successfully")

            create_indexes()
            return

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.warning(f"Connection attempt {attempt + 1} failed: {e}")
            if attempt < max_retries - 1:
                logger.info(f"Retrying in {retry_delay} seconds...")
                time.sleep(retry_delay)
                retry_delay *= 2
            else:
                logger.error(f"Failed to connect to MongoDB after {max_retries} attempts")
                raise

def close_mongo_connection():
    """Close database connection"""
    if db.client:
        db.client.close()
        logger.info("Disconnected from MongoDB")

def create_indexes():
    """Create indexes for the routine collections"""
    try:
        # Globally unique, so an upsert keyed by (id, user_id) cannot claim another user's routine
        db.database[ROUTINES].create_index("id", unique=True)
        db.database[ROUTINES].create_index([("user_id", 1), ("id", 1)], unique=True)
        db.database[ROUTINES].create_index([("user_id", 1), ("is_active", 1), ("created_at", -1)])

        db.database[VERSIONS].create_index([("routine_id", 1), ("version_number", -1)], unique=True)
        db.database[VERSIONS].create_index([("user_id", 1), ("routine_id", 1)])

        db.database[USAGE_EVENTS].create_index([("user_id", 1), ("timestamp", -1)])
        db.database[USAGE_EVENTS].create_index([("user_id", 1), ("routine_id", 1), ("timestamp", -1)])

        db.database[NOTES].create_index([("user_id", 1), ("routine_id", 1), ("created_at", -1)])

        logger.info("Database indexes created successfully")

    except Exception as e:
        logger.error(f"Error creating indexes: {e}")


Sort = Sequence[Tuple[str, int]]


class RemoteStore(Protocol):
    """Persistence verbs the routine subsystem needs from its remote store"""

    def upsert(self, collection: str, key: Dict[str, Any], document: Dict[str, Any]) -> None: ...

    def upsert_many(self, collection: str, key_fields: Sequence[str], documents: List[Dict[str, Any]]) -> None: ...

    def insert(self, collection: str, document: Dict[str, Any]) -> None: ...

    def find(self, collection: str, query: Dict[str, Any], sort: Optional[Sort] = None,
             limit: Optional[int] = None) -> List[Dict[str, Any]]: ...

    def update(self, collection: str, query: Dict[str, Any], changes: Dict[str, Any]) -> int: ...

    def count(self, collection: str, query: Dict[str, Any]) -> int: ...


class MongoRemoteStore:
    """RemoteStore on a pymongo database; driver errors surface as RemoteStoreError"""

    def __init__(self, database: Optional[MongoDatabase] = None):
        self._database = database

    @property
    def database(self) -> MongoDatabase:
        database = self._database if self._database is not None else get_database()
        if database is None:
            raise RemoteStoreError("No database connection")
        return database

    def upsert(self, collection, key, document):
        try:
            self.database[collection].replace_one(key, document, upsert=True)
        except DuplicateKeyError as e:
            raise RemoteStoreError(f"upsert into {collection} conflicts with an existing key: {e}") from e
        except PyMongoError as e:
            raise RemoteStoreError(f"upsert into {collection} failed: {e}") from e

    def upsert_many(self, collection, key_fields, documents):
        if not documents:
            return
        operations = [
            ReplaceOne({field: doc[field] for field in key_fields}, doc, upsert=True)
            for doc in documents
        ]
        try:
            self.database[collection].bulk_write(operations, ordered=False)
        except PyMongoError as e:
            raise RemoteStoreError(f"bulk upsert into {collection} failed: {e}") from e

    def insert(self, collection, document):
        try:
            # insert_one adds _id to the dict it is given
            self.database[collection].insert_one(dict(document))
        except PyMongoError as e:
            raise RemoteStoreError(f"insert into {collection} failed: {e}") from e

    def find(self, collection, query, sort=None, limit=None):
        try:
            cursor = self.database[collection].find(query, {"_id": 0})
            if sort:
                cursor = cursor.sort(list(sort))
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            raise RemoteStoreError(f"find in {collection} failed: {e}") from e

    def update(self, collection, query, changes):
        try:
            result = self.database[collection].update_many(query, {"$set": changes})
            return result.modified_count
        except PyMongoError as e:
            raise RemoteStoreError(f"update in {collection} failed: {e}") from e

    def count(self, collection, query):
        try:
            return self.database[collection].count_documents(query)
        except PyMongoError as e:
            raise RemoteStoreError(f"count in {collection} failed: {e}") from e
