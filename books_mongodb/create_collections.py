import logging

from pymongo.database import Database
from pymongo.errors import CollectionInvalid, PyMongoError

from .connect_db import BOOKS_COLLECTION, get_database
from .indexes import create_standard_indexes
from .schema import books_schema

logger = logging.getLogger(__name__)


def create_collections(db: Database = None, with_indexes: bool = True) -> None:
    if db is None:
        db = get_database()

    collections = {
        BOOKS_COLLECTION: books_schema,
    }

    for name, schema in collections.items():
        try:
            db.create_collection(name)
        except CollectionInvalid:
            logger.debug("Collection '%s' already exists", name)

        try:
            db.command("collMod", name, validator={"$jsonSchema": schema})
            logger.info("Created/updated collection '%s' with validation.", name)
        except PyMongoError as e:
            logger.warning("Failed to apply validator to '%s': %s", name, e)

        if with_indexes:
            create_standard_indexes(db[name])


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_collections()
