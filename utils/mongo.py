"""
MongoDB persistence gateway for the operational documents.
"""
import logging

from bson import ObjectId
from bson.errors import InvalidId
from django.conf import settings
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)

BUSES = 'buses'
EMPLOYEES = 'employees'
TRIPS = 'trips'
BOOKINGS = 'ticket_bookings'
FINANCE_RECORDS = 'finance_records'

# MongoDB client singleton
_mongo_client = None
_mongo_db = None


def get_mongo_db():
    """Get MongoDB database instance (singleton pattern)."""
    global _mongo_client, _mongo_db

    if _mongo_db is None:
        timeout_ms = settings.MONGODB_TIMEOUT_MS
        try:
            client = MongoClient(
                settings.MONGODB_URI,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
                tz_aware=True,
            )
            client.admin.command('ping')
        except PyMongoError as e:
            logger.error("MongoDB connection failed: %s", e)
            raise PersistenceError("Document database is unavailable.") from e

        _mongo_client = client
        _mongo_db = client[settings.MONGODB_NAME]
        ensure_indexes(_mongo_db)

    return _mongo_db


def ensure_indexes(db):
    """Create the indexes the list views sort and filter on."""
    try:
        db[BUSES].create_index([("name", ASCENDING)])
        db[EMPLOYEES].create_index([("full_name", ASCENDING)])
        db[TRIPS].create_index([("departure", DESCENDING)])
        db[TRIPS].create_index([("status", ASCENDING)])
        db[BOOKINGS].create_index([("booking_date", DESCENDING)])
        db[BOOKINGS].create_index([("trip_id", ASCENDING), ("status", ASCENDING)])
        db[FINANCE_RECORDS].create_index([("date", DESCENDING)])
        db[FINANCE_RECORDS].create_index([("type", ASCENDING), ("category", ASCENDING)])
    except PyMongoError as e:
        logger.warning("Error creating MongoDB indexes: %s", e)


def get_gateway():
    """Gateway bound to the configured database."""
    return MongoGateway(get_mongo_db())


def _object_id(document_id):
    if isinstance(document_id, ObjectId):
        return document_id
    try:
        return ObjectId(str(document_id))
    except (InvalidId, TypeError):
        return None


def _to_document(raw):
    if raw is None:
        return None
    document = dict(raw)
    document['id'] = str(document.pop('_id'))
    return document


def _sort_spec(ordering):
    return [
        (field.lstrip('-'), DESCENDING if field.startswith('-') else ASCENDING)
        for field in ordering
    ]


class MongoGateway:
    """
    Generic get/create/update/delete/query access by collection name and id.

    Documents cross this boundary as plain dicts carrying a string ``id``;
    the ObjectId ``_id`` never leaks out. A malformed id is treated as a
    missing document. Driver errors surface as PersistenceError.
    """

    def __init__(self, db):
        self.db = db

    def get(self, collection, document_id):
        oid = _object_id(document_id)
        if oid is None:
            return None
        try:
            return _to_document(self.db[collection].find_one({'_id': oid}))
        except PyMongoError as e:
            raise self._failure('read', collection, e)

    def create(self, collection, document):
        fields = {k: v for k, v in document.items() if k != 'id'}
        try:
            result = self.db[collection].insert_one(fields)
        except PyMongoError as e:
            raise self._failure('write', collection, e)
        return str(result.inserted_id)

    def update(self, collection, document_id, fields):
        oid = _object_id(document_id)
        if oid is None:
            return False
        changes = {k: v for k, v in fields.items() if k != 'id'}
        if not changes:
            return self.get(collection, document_id) is not None
        try:
            result = self.db[collection].update_one({'_id': oid}, {'$set': changes})
        except PyMongoError as e:
            raise self._failure('write', collection, e)
        return result.matched_count == 1

    def delete(self, collection, document_id):
        oid = _object_id(document_id)
        if oid is None:
            return False
        try:
            result = self.db[collection].delete_one({'_id': oid})
        except PyMongoError as e:
            raise self._failure('write', collection, e)
        return result.deleted_count == 1

    def query(self, collection, filters=None, ordering=None, limit=None):
        try:
            cursor = self.db[collection].find(filters or {})
            if ordering:
                cursor = cursor.sort(_sort_spec(ordering))
            if limit:
                cursor = cursor.limit(limit)
            return [_to_document(raw) for raw in cursor]
        except PyMongoError as e:
            raise self._failure('read', collection, e)

    def count(self, collection, filters=None):
        try:
            return self.db[collection].count_documents(filters or {})
        except PyMongoError as e:
            raise self._failure('read', collection, e)

    def add_to_set(self, collection, document_id, field, value):
        """
        Add ``value`` to the array ``field`` only if it is not there yet.

        Single conditional update: returns False when the document is missing
        or already contains the value.
        """
        oid = _object_id(document_id)
        if oid is None:
            return False
        try:
            updated = self.db[collection].find_one_and_update(
                {'_id': oid, field: {'$nin': [value]}},
                {'$push': {field: value}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._failure('write', collection, e)
        return updated is not None

    def pull(self, collection, document_id, field, value):
        oid = _object_id(document_id)
        if oid is None:
            return False
        try:
            result = self.db[collection].update_one({'_id': oid}, {'$pull': {field: value}})
        except PyMongoError as e:
            raise self._failure('write', collection, e)
        return result.matched_count == 1

    def _failure(self, action, collection, error):
        logger.error("MongoDB %s on '%s' failed: %s", action, collection, error)
        return PersistenceError(f"Could not {action} {collection}.")
