"""Example book documents used by the query walkthrough and the tests."""
import copy

CATCHER_IN_THE_RYE = {
    "title": "The Catcher in the Rye",
    "author": "J.D. Salinger",
    "genre": "Literary Fiction",
    "publicationYear": 1951,
    "price": 9.99,
    "reviews": [],
}

SEED_BOOKS = [
    {
        "title": "Dune",
        "author": "Frank Herbert",
        "genre": "Science Fiction",
        "publicationYear": 1965,
        "price": 14.50,
        "reviews": [{"user": "Zoe", "rating": 5, "comment": "Epic!"}],
    },
    {
        "title": "Sapiens: A Brief History of Humankind",
        "author": "Yuval Noah Harari",
        "genre": "Non-Fiction",
        "publicationYear": 2011,
        "price": 18.75,
        "reviews": [{"user": "Frank", "rating": 5, "comment": "Eye-opening."}],
    },
]

# Titles the walkthrough's filters refer to (Orwell, Harper Lee, Alice, Classic, pre-1900).
CLASSICS = [
    {
        "title": "1984",
        "author": "George Orwell",
        "genre": "Classic",
        "publicationYear": 1949,
        "price": 8.99,
        "reviews": [{"user": "Alice", "rating": 5, "comment": "Chilling."}],
    },
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "genre": "Classic",
        "publicationYear": 1960,
        "price": 12.25,
        "reviews": [
            {"user": "Bob", "rating": 4, "comment": "Moving."},
            {"user": "Alice", "rating": 3},
        ],
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "genre": "Classic",
        "publicationYear": 1813,
        "price": 7.50,
        "reviews": [],
    },
    {
        "title": "Frankenstein",
        "author": "Mary Shelley",
        "genre": "Gothic",
        "publicationYear": 1818,
        "price": 6.25,
        "reviews": [{"user": "Carol", "rating": 4, "comment": "Timeless classic."}],
    },
]

NEW_REVIEW = {"user": "Grace", "rating": 4, "comment": "Still relevant today."}


def all_books() -> list:
    """Fresh copies of every example book, safe to insert (insert adds _id in place)."""
    return copy.deepcopy([CATCHER_IN_THE_RYE] + SEED_BOOKS + CLASSICS)
