"""CRUD and query helpers for the ``books`` collection.

Every function takes the pymongo ``Collection`` as its first argument, so the
same code runs against a live server, a test double, or whatever collection
the FastAPI dependency hands over.
"""
import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.cursor import Cursor

from .validation import validate_book, validate_review

logger = logging.getLogger(__name__)

SortSpec = Union[Dict[str, int], Sequence[Tuple[str, int]]]


class UpdateCounts(NamedTuple):
    matched: int
    modified: int


# ======== Update operator builders ========
def set_fields(**fields: Any) -> dict:
    return {"$set": fields}


def increment_fields(**deltas: Union[int, float]) -> dict:
    return {"$inc": deltas}


def push_review(review: dict) -> dict:
    validate_review(review)
    return {"$push": {"reviews": review}}


def _normalize_sort(sort: Optional[SortSpec]) -> Optional[List[Tuple[str, int]]]:
    if not sort:
        return None
    if isinstance(sort, dict):
        return list(sort.items())
    return [(field, direction) for field, direction in sort]


def parse_sort(expr: Optional[str]) -> Optional[List[Tuple[str, int]]]:
    """Parse ``"publicationYear,-price"`` into ``[("publicationYear", 1), ("price", -1)]``."""
    if not expr:
        return None
    keys = []
    for part in expr.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("-"):
            keys.append((part[1:], DESCENDING))
        else:
            keys.append((part.lstrip("+"), ASCENDING))
    return keys or None


# ======== Generic operations ========
def insert_book(collection: Collection, book: dict):
    """Validate and insert one book; returns the id assigned by the store."""
    doc = dict(validate_book(book))
    result = collection.insert_one(doc)
    logger.debug("Inserted book %r with id %s", doc.get("title"), result.inserted_id)
    return result.inserted_id


def insert_books(collection: Collection, books: Iterable[dict]) -> list:
    docs = [dict(validate_book(b)) for b in books]
    if not docs:
        return []
    result = collection.insert_many(docs, ordered=True)
    logger.debug("Inserted %d books", len(result.inserted_ids))
    return list(result.inserted_ids)


def find_books(
    collection: Collection,
    filter: Optional[dict] = None,
    projection: Optional[dict] = None,
    sort: Optional[SortSpec] = None,
    skip: int = 0,
    limit: int = 0,
) -> Cursor:
    """Lazy cursor over matching books.

    ``skip`` is applied before ``limit``; ``limit=0`` means no cap. Ties in
    the sort order come back in whatever order the server picks.
    """
    if skip < 0 or limit < 0:
        raise ValueError("skip and limit must be non-negative")
    cursor = collection.find(filter or {}, projection)
    sort_keys = _normalize_sort(sort)
    if sort_keys:
        cursor = cursor.sort(sort_keys)
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return cursor


def find_book(collection: Collection, filter: dict, projection: Optional[dict] = None) -> Optional[dict]:
    return collection.find_one(filter, projection)


def update_book(collection: Collection, filter: dict, update: dict) -> UpdateCounts:
    result = collection.update_one(filter, update)
    logger.debug("update_one %s matched=%d modified=%d", filter, result.matched_count, result.modified_count)
    return UpdateCounts(result.matched_count, result.modified_count)


def update_books(collection: Collection, filter: dict, update: dict) -> UpdateCounts:
    result = collection.update_many(filter, update)
    logger.debug("update_many %s matched=%d modified=%d", filter, result.matched_count, result.modified_count)
    return UpdateCounts(result.matched_count, result.modified_count)


def replace_book(collection: Collection, filter: dict, book: dict) -> UpdateCounts:
    doc = {k: v for k, v in validate_book(book).items() if k != "_id"}
    result = collection.replace_one(filter, doc)
    return UpdateCounts(result.matched_count, result.modified_count)


def delete_book(collection: Collection, filter: dict) -> int:
    return collection.delete_one(filter).deleted_count


def delete_books(collection: Collection, filter: dict) -> int:
    deleted = collection.delete_many(filter).deleted_count
    logger.info("Deleted %d books matching %s", deleted, filter)
    return deleted


# ======== Named queries ========
def find_all(collection: Collection) -> Cursor:
    return find_books(collection, {})


def find_by_author(collection: Collection, author: str) -> Cursor:
    return find_books(collection, {"author": author})


def find_by_title(collection: Collection, title: str) -> Cursor:
    return find_books(collection, {"title": title})


def find_titles_and_authors(collection: Collection) -> Cursor:
    return find_books(collection, {}, {"title": 1, "author": 1, "_id": 0})


def set_price(collection: Collection, title: str, price: float) -> UpdateCounts:
    if price < 0:
        raise ValueError("price must be non-negative")
    return update_book(collection, {"title": title}, set_fields(price=price))


def increase_genre_price(collection: Collection, genre: str, amount: float) -> UpdateCounts:
    """Add ``amount`` to every price in ``genre``.

    A negative amount only touches books whose price stays >= 0.
    """
    filter = {"genre": genre}
    if amount < 0:
        filter["price"] = {"$gte": -amount}
    return update_books(collection, filter, increment_fields(price=amount))


def add_review(collection: Collection, title: str, review: dict) -> UpdateCounts:
    return update_book(collection, {"title": title}, push_review(review))


def delete_by_title(collection: Collection, title: str) -> int:
    return delete_book(collection, {"title": title})


def published_before_filter(year: int) -> dict:
    return {"publicationYear": {"$lt": year}}


def delete_published_before(collection: Collection, year: int) -> int:
    return delete_books(collection, published_before_filter(year))


def find_published_after_cheaper_than(collection: Collection, year: int, price: float) -> Cursor:
    return find_books(collection, {"publicationYear": {"$gt": year}, "price": {"$lt": price}})


def find_by_any_author(collection: Collection, authors: Iterable[str]) -> Cursor:
    return find_books(collection, {"$or": [{"author": a} for a in authors]})


def find_by_genre_with_rating(collection: Collection, genre: str, rating: int) -> Cursor:
    return find_books(collection, {"genre": genre, "reviews.rating": rating})


def find_sorted_by_year_and_title(collection: Collection) -> Cursor:
    return find_books(collection, {}, sort=[("publicationYear", ASCENDING), ("title", ASCENDING)])


def find_most_expensive(collection: Collection, n: int = 3) -> Cursor:
    return find_books(
        collection,
        {},
        {"title": 1, "price": 1, "_id": 0},
        sort=[("price", DESCENDING)],
        limit=n,
    )


def find_page(collection: Collection, skip: int, limit: int) -> Cursor:
    return find_books(collection, {}, skip=skip, limit=limit)


def find_reviewed_by(collection: Collection, user: str) -> Cursor:
    return find_books(collection, {"reviews": {"$elemMatch": {"user": user}}})


def search_text(collection: Collection, terms: str, projection: Optional[dict] = None) -> Cursor:
    """Full-text search over the text index (title/author); needs create_text_index first."""
    return find_books(collection, {"$text": {"$search": terms}}, projection)
