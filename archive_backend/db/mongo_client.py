# archive_backend/db/mongo_client.py

# This file handles MongoDB connection, disconnection,
# and provides simple async data access functions.
# The client is a process-wide handle: connect_to_mongo() may be called by the
# startup event or lazily by the first request, and an asyncio.Lock makes sure
# concurrent first callers only create one client.

import asyncio
from typing import Dict, Any, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, DuplicateKeyError

from ..config.settings import Settings, settings as default_settings
from ..shared.errors import ConflictError


# --- Global DB Client and Database reference ---
mongo_client: MongoClient | None = None
mongo_db: Database | None = None

_connect_lock = asyncio.Lock()

USERS_COLLECTION = "users"
ARCHIVE_ITEMS_COLLECTION = "archive_items"


def ensure_indexes(db: Database) -> None:
    """Creates the unique and lookup indexes the application relies on."""
    users = db.get_collection(USERS_COLLECTION)
    users.create_index([("username", ASCENDING)], unique=True)
    users.create_index([("email", ASCENDING)], unique=True)
    users.create_index([("verificationToken", ASCENDING)], sparse=True)
    users.create_index([("passwordResetToken", ASCENDING)], sparse=True)

    items = db.get_collection(ARCHIVE_ITEMS_COLLECTION)
    items.create_index([("slug", ASCENDING)], unique=True)
    items.create_index([("title", ASCENDING)])
    items.create_index([("category", ASCENDING)])
    items.create_index([("author", ASCENDING), ("createdAt", DESCENDING)])


def use_database(db: Database) -> None:
    """Installs an already-built database handle (used by tests and scripts)."""
    global mongo_db
    ensure_indexes(db)
    mongo_db = db


# --- Connection Function ---
async def connect_to_mongo(settings: Settings = default_settings) -> Database:
    """Connects to MongoDB once per process and returns the database handle."""
    global mongo_client, mongo_db
    if mongo_db is not None:
        return mongo_db

    async with _connect_lock:
        # Another request may have finished connecting while we waited
        if mongo_db is not None:
            return mongo_db

        if not settings.MONGODB_URI.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("Invalid MongoDB URI. It must start with mongodb:// or mongodb+srv://")

        print("Attempting to connect to MongoDB...")
        client = MongoClient(settings.MONGODB_URI, serverSelectionTimeoutMS=5000, tz_aware=True)
        try:
            await asyncio.to_thread(client.admin.command, 'ping')
        except ConnectionFailure as e:
            print(f"FATAL ERROR: MongoDB connection failed: {e}")
            client.close()
            raise

        db = client.get_database(settings.DB_NAME)
        await asyncio.to_thread(ensure_indexes, db)

        mongo_client = client
        mongo_db = db
        print(f"MongoDB connection successful. Using database: {settings.DB_NAME}")
        return mongo_db


# --- Disconnection Function ---
async def close_mongo_connection() -> None:
    """Closes the MongoDB client connection."""
    global mongo_client, mongo_db
    if mongo_client is None:
        print("No active MongoDB client to close.")
        return

    print("Closing MongoDB connection.")
    await asyncio.to_thread(mongo_client.close)
    mongo_client = None
    mongo_db = None


async def get_database() -> Database:
    """Returns the database handle, connecting lazily on first use."""
    if mongo_db is not None:
        return mongo_db
    return await connect_to_mongo()


# --- Getter functions for collections ---
async def get_users_collection() -> Collection:
    """Gets the MongoDB 'users' collection."""
    db = await get_database()
    return db.get_collection(USERS_COLLECTION)


async def get_archive_items_collection() -> Collection:
    """Gets the MongoDB 'archive_items' collection."""
    db = await get_database()
    return db.get_collection(ARCHIVE_ITEMS_COLLECTION)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Converts a string to ObjectId, returning None for malformed ids."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


# --- Data Access Functions (CRUD) ---
async def find_one(collection: Collection, query: Dict[str, Any], projection: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    """Finds a single document in a collection."""
    return await asyncio.to_thread(collection.find_one, query, projection)


async def find_many(collection: Collection, query: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """Finds multiple documents in a collection."""
    limit = options.get("limit", 0) if options else 0
    sort = options.get("sort", None) if options else None
    projection = options.get("projection", None) if options else None
    skip = options.get("skip", 0) if options else 0

    def _run() -> List[Dict[str, Any]]:
        cursor = collection.find(query, projection)
        if sort:
            cursor = cursor.sort(sort)
        if skip > 0:
            cursor = cursor.skip(skip)
        if limit > 0:
            cursor = cursor.limit(limit)
        return list(cursor)

    return await asyncio.to_thread(_run)


async def count_documents(collection: Collection, query: Dict[str, Any]) -> int:
    return await asyncio.to_thread(collection.count_documents, query)


async def distinct(collection: Collection, field: str, query: Dict[str, Any]) -> List[Any]:
    return await asyncio.to_thread(collection.distinct, field, query)


async def insert_one(collection: Collection, document: Dict[str, Any], conflict_message: Optional[str] = None) -> ObjectId:
    """
    Inserts a single document and returns its ObjectId.
    A unique-index violation is raised as ConflictError so callers can tell a
    lost race apart from any other failure.
    """
    try:
        result = await asyncio.to_thread(collection.insert_one, document)
    except DuplicateKeyError as e:
        print(f"MongoDB Duplicate Key Error during insert_one into '{collection.name}': {e.details.get('keyValue') if e.details else ''}")
        raise ConflictError(conflict_message)
    return result.inserted_id


async def update_one_by_id(collection: Collection, doc_id: Any, update_data: Dict[str, Any],
                           unset_fields: Optional[List[str]] = None,
                           conflict_message: Optional[str] = None) -> bool:
    """
    Updates a single document by its ObjectId using $set (and optionally $unset).
    Returns True if a document matched, False if the id is malformed or unknown.
    """
    object_id = to_object_id(doc_id)
    if object_id is None:
        return False

    update: Dict[str, Any] = {}
    if update_data:
        update["$set"] = update_data
    if unset_fields:
        update["$unset"] = {field: "" for field in unset_fields}
    if not update:
        return await find_one(collection, {"_id": object_id}, {"_id": 1}) is not None

    try:
        result = await asyncio.to_thread(collection.update_one, {"_id": object_id}, update)
    except DuplicateKeyError as e:
        print(f"MongoDB Duplicate Key Error during update of {object_id} in '{collection.name}': {e.details.get('keyValue') if e.details else ''}")
        raise ConflictError(conflict_message)
    return result.matched_count == 1


async def delete_one_by_id(collection: Collection, doc_id: Any) -> bool:
    """Deletes a document by ObjectId. Returns True if one was removed."""
    object_id = to_object_id(doc_id)
    if object_id is None:
        return False
    result = await asyncio.to_thread(collection.delete_one, {"_id": object_id})
    return result.deleted_count == 1
