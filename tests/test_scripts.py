import json
from unittest.mock import MagicMock

import pandas as pd
import requests

from books_mongodb import indexes
from scripts import fetch_books, run_queries


def test_run_queries_walkthrough(collection, capsys, monkeypatch):
    # $round is outside what the in-memory engine evaluates
    monkeypatch.setattr(run_queries.aggregations, "average_rating_per_book", lambda coll: [])

    run_queries.main(
        ["--steps", "insert", "find", "update", "delete", "advanced", "aggregate"],
        collection=collection,
    )

    out = capsys.readouterr().out
    assert "Inserted 6 books" in out
    assert "Deleted published before 1900: 2" in out
    assert collection.find_one({"title": "The Catcher in the Rye"}) is None
    assert collection.find_one({"title": "Dune"})["price"] == 15.5
    assert [r["user"] for r in collection.find_one({"title": "1984"})["reviews"]] == ["Alice", "Grace"]


def test_run_queries_reset_and_drop_indexes(seeded, capsys):
    indexes.create_year_index(seeded)

    run_queries.main(["--reset", "--steps", "find", "--drop-indexes"], collection=seeded)

    out = capsys.readouterr().out
    assert "Cleared 7 existing books" in out
    assert "(no results)" in out
    assert "publicationYear_1" not in indexes.index_names(seeded)


def _response(status=200, payload=None):
    r = MagicMock()
    r.status_code = status
    r.json.return_value = payload
    r.text = json.dumps(payload)
    return r


ROWS = [
    {"id": "1", "title": "Dune", "author": "Frank Herbert", "genre": "Science Fiction",
     "publicationYear": 1965, "price": 14.5, "reviews": [{"user": "Zoe", "rating": 5}]},
]


def test_fetch_books_passes_filters(monkeypatch):
    get = MagicMock(return_value=_response(payload=ROWS))
    monkeypatch.setattr(fetch_books.requests, "get", get)

    rows = fetch_books.fetch_books("http://api/", genre="Science Fiction", limit=0, author=None)

    assert rows == ROWS
    get.assert_called_once_with("http://api/books", params={"genre": "Science Fiction", "limit": 0}, timeout=10)


def test_fetch_books_handles_errors(monkeypatch, capsys):
    monkeypatch.setattr(fetch_books.requests, "get", MagicMock(return_value=_response(500, {"detail": "x"})))
    assert fetch_books.fetch_books("http://api") is None

    monkeypatch.setattr(fetch_books.requests, "get", MagicMock(side_effect=requests.ConnectionError("refused")))
    assert fetch_books.fetch_books("http://api") is None

    monkeypatch.setattr(fetch_books.requests, "get", MagicMock(return_value=_response(payload={"id": "1"})))
    assert fetch_books.fetch_books("http://api") is None
    assert "Expected a list" in capsys.readouterr().out


def test_fetch_books_writes_json_and_csv(monkeypatch, tmp_path):
    monkeypatch.setattr(fetch_books.requests, "get", MagicMock(return_value=_response(payload=ROWS)))

    json_out = tmp_path / "books.json"
    fetch_books.main(["--api-base", "http://api", "--out", str(json_out)])
    assert json.loads(json_out.read_text(encoding="utf8")) == ROWS

    csv_out = tmp_path / "books.csv"
    fetch_books.main(["--api-base", "http://api", "--out", str(csv_out), "--format", "csv"])
    df = pd.read_csv(csv_out)
    assert list(df["title"]) == ["Dune"]
    assert list(df["reviewCount"]) == [1]
    assert "reviews" not in df.columns
