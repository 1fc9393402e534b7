"""scripts/run_queries.py

Walk through the books example queries against a MongoDB database: seed the
sample books, run CRUD statements, advanced finds, aggregation pipelines and
index management, printing what each step returns.

Usage (PowerShell):
    $env:MONGO_URI = 'mongodb://localhost:27017'
    python ./scripts/run_queries.py --reset
    python ./scripts/run_queries.py --steps find aggregate

"""
from __future__ import annotations
import argparse
import logging
import os
from pprint import pprint

from books_mongodb import aggregations, books, indexes, sample_data
from books_mongodb.connect_db import get_books_collection


STEPS = ("insert", "find", "update", "delete", "advanced", "aggregate", "indexes")


def _show(label: str, rows) -> None:
    print(f"\n--- {label}")
    rows = list(rows)
    if not rows:
        print("   (no results)")
    for row in rows:
        pprint(row)


def step_insert(collection) -> None:
    book_id = books.insert_book(collection, sample_data.CATCHER_IN_THE_RYE)
    print(f" Inserted one book with ID: {book_id}")
    ids = books.insert_books(collection, sample_data.SEED_BOOKS + sample_data.CLASSICS)
    print(f" Inserted {len(ids)} books")


def step_find(collection) -> None:
    _show("All books", books.find_all(collection))
    _show("Books by George Orwell", books.find_by_author(collection, "George Orwell"))
    _show("Titles and authors", books.find_titles_and_authors(collection))


def step_update(collection) -> None:
    counts = books.set_price(collection, "The Catcher in the Rye", 10.99)
    print(f" set price: matched={counts.matched} modified={counts.modified}")
    counts = books.increase_genre_price(collection, "Science Fiction", 1.00)
    print(f" Science Fiction +1.00: matched={counts.matched} modified={counts.modified}")
    counts = books.add_review(collection, "1984", sample_data.NEW_REVIEW)
    print(f" review added to '1984': matched={counts.matched}")


def step_delete(collection) -> None:
    print(f" Deleted by title: {books.delete_by_title(collection, 'The Catcher in the Rye')}")
    print(f" Deleted published before 1900: {books.delete_published_before(collection, 1900)}")


def step_advanced(collection) -> None:
    _show("After 1950 and under $15", books.find_published_after_cheaper_than(collection, 1950, 15))
    _show("Orwell or Harper Lee", books.find_by_any_author(collection, ["George Orwell", "Harper Lee"]))
    _show("Classics with a 5-star review", books.find_by_genre_with_rating(collection, "Classic", 5))
    _show("Sorted by year, then title", books.find_sorted_by_year_and_title(collection))
    _show("3 most expensive", books.find_most_expensive(collection, 3))
    _show("Page: skip 2, limit 2", books.find_page(collection, 2, 2))
    _show("Reviewed by Alice", books.find_reviewed_by(collection, "Alice"))


def step_aggregate(collection) -> None:
    print(f"\n--- Total books: {aggregations.count_books(collection)}")
    _show("Books per author", aggregations.count_books_by_author(collection))
    _show("Average price per genre", aggregations.average_price_by_genre(collection))
    _show("Reviews per book", aggregations.review_counts(collection))
    _show("Average rating per book", aggregations.average_rating_per_book(collection))
    _show("Top 3 most expensive", aggregations.top_expensive_books(collection, 3))


def step_indexes(collection) -> None:
    for name in indexes.create_standard_indexes(collection):
        print(f" Created index: {name}")
    _show("Text search 'classic timeless'", books.search_text(collection, "classic timeless"))
    _show("Indexes", indexes.list_indexes(collection))


RUNNERS = {
    "insert": step_insert,
    "find": step_find,
    "update": step_update,
    "delete": step_delete,
    "advanced": step_advanced,
    "aggregate": step_aggregate,
    "indexes": step_indexes,
}


def main(argv: list[str] | None = None, collection=None):
    parser = argparse.ArgumentParser(
        description="Run the books example queries against MongoDB",
    )
    parser.add_argument(
        "--steps",
        nargs="+",
        choices=STEPS,
        default=list(STEPS),
        help="Sections to run, in order (default: all)",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete every book before running",
    )
    parser.add_argument(
        "--drop-indexes",
        action="store_true",
        help="Drop all indexes on the collection when done",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        help="Logging level",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if collection is None:
        collection = get_books_collection()

    if args.reset:
        print(f" Cleared {books.delete_books(collection, {})} existing books")

    for step in args.steps:
        print(f"\n===== {step.upper()} =====")
        RUNNERS[step](collection)

    if args.drop_indexes:
        indexes.drop_indexes(collection)
        print(" Dropped all indexes")


if __name__ == "__main__":
    main()
