# schema.py

review_schema = {
    "bsonType": "object",
    "required": ["user", "rating"],
    "properties": {
        "user": {"bsonType": "string"},
        "rating": {"bsonType": "int"},
        "comment": {"bsonType": ["string", "null"]}
    }
}

books_schema = {
    "bsonType": "object",
    "required": ["title"],
    "properties": {
        "title": {"bsonType": "string", "minLength": 1},
        "author": {"bsonType": "string"},
        "genre": {"bsonType": "string"},
        "publicationYear": {"bsonType": "int"},
        "price": {"bsonType": ["double", "int", "decimal"], "minimum": 0},
        "reviews": {"bsonType": "array", "items": review_schema}
    }
}
