"""Aggregation pipelines over the books collection.

Builders return plain pipeline lists so they can be inspected or extended;
the ``run``-style helpers execute them and materialise the result.
"""
import logging
from typing import List

from pymongo.collection import Collection

logger = logging.getLogger(__name__)


def run_pipeline(collection: Collection, pipeline: List[dict]) -> List[dict]:
    logger.debug("Running pipeline with stages %s", [next(iter(stage)) for stage in pipeline])
    return list(collection.aggregate(pipeline))


# ======== Pipeline builders ========
def count_pipeline(field: str = "totalBooks") -> List[dict]:
    return [{"$count": field}]


def count_by_author_pipeline() -> List[dict]:
    return [
        {
            "$group": {
                "_id": "$author",
                "bookCount": {"$sum": 1},
            }
        }
    ]


def average_price_by_genre_pipeline() -> List[dict]:
    return [
        {
            "$group": {
                "_id": "$genre",
                "averagePrice": {"$avg": "$price"},
            }
        }
    ]


def review_counts_pipeline() -> List[dict]:
    return [
        {
            "$project": {
                "title": 1,
                "numberOfReviews": {"$size": "$reviews"},
                "_id": 0,
            }
        },
        {"$sort": {"numberOfReviews": -1}},
    ]


def average_rating_pipeline(decimals: int = 2) -> List[dict]:
    # $unwind drops books with no reviews, so every group has totalReviews >= 1
    return [
        {"$unwind": "$reviews"},
        {
            "$group": {
                "_id": "$title",
                "avgRating": {"$avg": "$reviews.rating"},
                "totalReviews": {"$sum": 1},
            }
        },
        {"$match": {"totalReviews": {"$gt": 0}}},
        {"$sort": {"avgRating": -1}},
        {
            "$project": {
                "bookTitle": "$_id",
                "averageRating": {"$round": ["$avgRating", decimals]},
                "totalReviews": 1,
                "_id": 0,
            }
        },
    ]


def top_expensive_pipeline(n: int = 3) -> List[dict]:
    if n <= 0:
        raise ValueError("n must be positive")
    return [
        {"$sort": {"price": -1}},
        {"$limit": n},
        {
            "$project": {
                "title": 1,
                "author": 1,
                "price": 1,
                "_id": 0,
            }
        },
    ]


# ======== Runners ========
def count_books(collection: Collection) -> int:
    rows = run_pipeline(collection, count_pipeline())
    # $count emits nothing at all for an empty collection
    return rows[0]["totalBooks"] if rows else 0


def count_books_by_author(collection: Collection) -> List[dict]:
    return run_pipeline(collection, count_by_author_pipeline())


def average_price_by_genre(collection: Collection) -> List[dict]:
    return run_pipeline(collection, average_price_by_genre_pipeline())


def review_counts(collection: Collection) -> List[dict]:
    return run_pipeline(collection, review_counts_pipeline())


def average_rating_per_book(collection: Collection) -> List[dict]:
    return run_pipeline(collection, average_rating_pipeline())


def top_expensive_books(collection: Collection, n: int = 3) -> List[dict]:
    return run_pipeline(collection, top_expensive_pipeline(n))
