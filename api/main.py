from typing import Optional

from bson.objectid import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, FastAPI, HTTPException, Query, status
from pydantic import BaseModel, Field
from pymongo.errors import OperationFailure

from books_mongodb import aggregations, books, indexes
from books_mongodb.connect_db import get_books_collection
from books_mongodb.validation import BookValidationError, validate_book

app = FastAPI(title="Books CRUD API (Mongo)", version="1.0.0")


def db_conn():
    # /health does its own ping; other routes surface connection errors on first use
    return get_books_collection(ping=False)


# ======== Schemas ========
class ReviewIn(BaseModel):
    user: str = Field(min_length=1, max_length=255)
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class BookIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    genre: str = Field(min_length=1, max_length=64)
    publicationYear: int
    price: float = Field(ge=0)
    reviews: list[ReviewIn] = Field(default_factory=list)


class ReviewOut(BaseModel):
    user: str
    rating: Optional[int] = None
    comment: Optional[str] = None


class BookOut(BaseModel):
    id: str
    title: str
    author: Optional[str] = None
    genre: Optional[str] = None
    publicationYear: Optional[int] = None
    price: Optional[float] = None
    reviews: list[ReviewOut] = Field(default_factory=list)


class BookPatch(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    author: Optional[str] = Field(default=None, min_length=1, max_length=255)
    genre: Optional[str] = Field(default=None, min_length=1, max_length=64)
    publicationYear: Optional[int] = None
    price: Optional[float] = Field(default=None, ge=0)


class PriceIncrease(BaseModel):
    genre: str = Field(min_length=1, max_length=64)
    amount: float


# ======== Utility helpers ========
def _object_id(id: str) -> ObjectId:
    try:
        return ObjectId(id)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail="Invalid id")


def _format_book(doc: dict) -> dict:
    d = dict(doc)
    d["id"] = str(d.pop("_id", ""))
    d.setdefault("reviews", [])
    return d


def _book_doc(payload: BookIn) -> dict:
    doc = payload.model_dump()
    # comment is optional; keep absent comments out of stored reviews
    doc["reviews"] = [{k: v for k, v in r.items() if v is not None} for r in doc["reviews"]]
    return doc


def _schema_error(e: BookValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail=f"Schema validation error: {e}")


# ======== Books CRUD ========
@app.post("/books", response_model=dict, status_code=status.HTTP_201_CREATED, tags=["Books"])
def create_book(payload: BookIn, collection=Depends(db_conn)):
    try:
        inserted_id = books.insert_book(collection, _book_doc(payload))
    except BookValidationError as e:
        raise _schema_error(e)
    return {"status": "created", "id": str(inserted_id)}


@app.post("/books/bulk", response_model=dict, status_code=status.HTTP_201_CREATED, tags=["Books"])
def create_books(payload: list[BookIn], collection=Depends(db_conn)):
    try:
        ids = books.insert_books(collection, [_book_doc(p) for p in payload])
    except BookValidationError as e:
        raise _schema_error(e)
    return {"inserted": len(ids), "ids": [str(i) for i in ids]}


@app.get("/books", response_model=list[BookOut], tags=["Books"])
def list_books(
    author: Optional[str] = None,
    genre: Optional[str] = None,
    min_year: Optional[int] = Query(default=None, description="Published after this year"),
    max_price: Optional[float] = Query(default=None, description="Cheaper than this price"),
    sort: Optional[str] = Query(default=None, description="e.g. publicationYear,-price"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=0, ge=0),
    collection=Depends(db_conn),
):
    filter: dict = {}
    if author is not None:
        filter["author"] = author
    if genre is not None:
        filter["genre"] = genre
    if min_year is not None:
        filter["publicationYear"] = {"$gt": min_year}
    if max_price is not None:
        filter["price"] = {"$lt": max_price}
    cursor = books.find_books(collection, filter, sort=books.parse_sort(sort), skip=skip, limit=limit)
    return [BookOut(**_format_book(r)) for r in cursor]


@app.get("/books/search", response_model=list[BookOut], tags=["Books"])
def search_books(q: str = Query(min_length=1), collection=Depends(db_conn)):
    try:
        return [BookOut(**_format_book(r)) for r in books.search_text(collection, q)]
    except OperationFailure as e:
        raise HTTPException(status_code=400, detail=f"Text search failed: {e}")


@app.delete("/books", response_model=dict, tags=["Books"])
def delete_books_before(before_year: int, collection=Depends(db_conn)):
    return {"deleted": books.delete_published_before(collection, before_year)}


@app.post("/books/price-increase", response_model=dict, tags=["Books"])
def increase_price(payload: PriceIncrease, collection=Depends(db_conn)):
    counts = books.increase_genre_price(collection, payload.genre, payload.amount)
    return {"matched": counts.matched, "updated": counts.modified}


@app.get("/books/{id}", response_model=BookOut, tags=["Books"])
def get_book(id: str, collection=Depends(db_conn)):
    doc = books.find_book(collection, {"_id": _object_id(id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Book not found")
    return BookOut(**_format_book(doc))


@app.put("/books/{id}", response_model=dict, tags=["Books"])
def update_book(id: str, payload: BookIn, collection=Depends(db_conn)):
    oid = _object_id(id)
    try:
        counts = books.replace_book(collection, {"_id": oid}, _book_doc(payload))
    except BookValidationError as e:
        raise _schema_error(e)
    if counts.matched == 0:
        raise HTTPException(status_code=404, detail="Book not found")
    return {"updated": counts.modified}


@app.patch("/books/{id}", response_model=dict, tags=["Books"])
def patch_book(id: str, payload: BookPatch, collection=Depends(db_conn)):
    oid = _object_id(id)
    doc = books.find_book(collection, {"_id": oid})
    if not doc:
        raise HTTPException(status_code=404, detail="Book not found")
    payload_dict = payload.model_dump(exclude_unset=True)
    if not payload_dict:
        raise HTTPException(status_code=400, detail="No fields to update")
    # merge and validate against schema
    merged = dict(doc)
    merged.update(payload_dict)
    try:
        validate_book(merged)
    except BookValidationError as e:
        raise _schema_error(e)
    counts = books.update_book(collection, {"_id": oid}, books.set_fields(**payload_dict))
    return {"updated": counts.modified}


@app.post("/books/{id}/reviews", response_model=dict, status_code=status.HTTP_201_CREATED, tags=["Books"])
def add_review(id: str, payload: ReviewIn, collection=Depends(db_conn)):
    review = payload.model_dump(exclude_none=True)
    counts = books.update_book(collection, {"_id": _object_id(id)}, books.push_review(review))
    if counts.matched == 0:
        raise HTTPException(status_code=404, detail="Book not found")
    return {"updated": counts.modified}


@app.delete("/books/{id}", response_model=dict, tags=["Books"])
def delete_book(id: str, collection=Depends(db_conn)):
    deleted = books.delete_book(collection, {"_id": _object_id(id)})
    if deleted == 0:
        raise HTTPException(status_code=404, detail="Book not found")
    return {"deleted": deleted}


# ======== Stats ========
@app.get("/stats/count", response_model=dict, tags=["Stats"])
def stats_count(collection=Depends(db_conn)):
    return {"totalBooks": aggregations.count_books(collection)}


@app.get("/stats/authors", response_model=list[dict], tags=["Stats"])
def stats_authors(collection=Depends(db_conn)):
    return [{"author": r["_id"], "bookCount": r["bookCount"]} for r in aggregations.count_books_by_author(collection)]


@app.get("/stats/genres/average-price", response_model=list[dict], tags=["Stats"])
def stats_genre_prices(collection=Depends(db_conn)):
    return [
        {"genre": r["_id"], "averagePrice": r["averagePrice"]}
        for r in aggregations.average_price_by_genre(collection)
    ]


@app.get("/stats/reviews", response_model=list[dict], tags=["Stats"])
def stats_reviews(collection=Depends(db_conn)):
    return aggregations.review_counts(collection)


@app.get("/stats/ratings", response_model=list[dict], tags=["Stats"])
def stats_ratings(collection=Depends(db_conn)):
    return aggregations.average_rating_per_book(collection)


@app.get("/stats/top-expensive", response_model=list[dict], tags=["Stats"])
def stats_top_expensive(n: int = Query(default=3, ge=1, le=100), collection=Depends(db_conn)):
    return aggregations.top_expensive_books(collection, n)


# ======== Indexes ========
@app.get("/indexes", response_model=list[dict], tags=["Indexes"])
def get_indexes(collection=Depends(db_conn)):
    return [{"name": ix["name"], "key": dict(ix["key"])} for ix in indexes.list_indexes(collection)]


@app.post("/indexes/standard", response_model=dict, status_code=status.HTTP_201_CREATED, tags=["Indexes"])
def create_standard_indexes(collection=Depends(db_conn)):
    return {"created": indexes.create_standard_indexes(collection)}


@app.delete("/indexes/{name}", response_model=dict, tags=["Indexes"])
def delete_index(name: str, collection=Depends(db_conn)):
    if name == "_id_":
        raise HTTPException(status_code=400, detail="Cannot drop the _id index")
    try:
        indexes.drop_index(collection, name)
    except OperationFailure:
        raise HTTPException(status_code=404, detail="Index not found")
    return {"dropped": name}


@app.get("/health", response_model=dict, tags=["Health"])
def health(collection=Depends(db_conn)):
    # Simple ping
    try:
        collection.database.client.admin.command("ping")
        return {"status": "ok"}
    except Exception:
        raise HTTPException(status_code=500, detail="db ping failed")
