"""books_mongodb package initializer

Client helpers for the ``books`` MongoDB collection: connection settings,
schema validation, CRUD and query helpers, aggregation pipelines and index
management.
"""

__all__ = [
    "aggregations",
    "books",
    "connect_db",
    "create_collections",
    "indexes",
    "sample_data",
    "schema",
    "validation",
]
