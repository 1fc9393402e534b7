"""Index management for the books collection."""
import logging
from typing import Dict, List, Sequence, Tuple, Union

from pymongo import ASCENDING, DESCENDING, TEXT
from pymongo.collection import Collection

logger = logging.getLogger(__name__)

IndexKeys = Union[Dict[str, Union[int, str]], Sequence[Tuple[str, Union[int, str]]]]

YEAR_INDEX = [("publicationYear", ASCENDING)]
GENRE_PRICE_INDEX = [("genre", ASCENDING), ("price", DESCENDING)]
TEXT_INDEX = [("title", TEXT), ("author", TEXT)]


def create_index(collection: Collection, keys: IndexKeys, **options) -> str:
    key_list = list(keys.items()) if isinstance(keys, dict) else list(keys)
    if not key_list:
        raise ValueError("index needs at least one key")
    name = collection.create_index(key_list, **options)
    logger.info("Created index %s on '%s'", name, collection.name)
    return name


def create_year_index(collection: Collection) -> str:
    return create_index(collection, YEAR_INDEX)


def create_genre_price_index(collection: Collection) -> str:
    return create_index(collection, GENRE_PRICE_INDEX)


def create_text_index(collection: Collection) -> str:
    return create_index(collection, TEXT_INDEX)


def create_standard_indexes(collection: Collection) -> List[str]:
    return [
        create_year_index(collection),
        create_genre_price_index(collection),
        create_text_index(collection),
    ]


def list_indexes(collection: Collection) -> List[dict]:
    return [dict(ix) for ix in collection.list_indexes()]


def index_names(collection: Collection) -> List[str]:
    return [ix["name"] for ix in list_indexes(collection)]


def drop_index(collection: Collection, name: str) -> None:
    collection.drop_index(name)
    logger.info("Dropped index %s on '%s'", name, collection.name)


def drop_indexes(collection: Collection) -> None:
    # the server always keeps _id_
    collection.drop_indexes()
    logger.info("Dropped all indexes on '%s'", collection.name)
