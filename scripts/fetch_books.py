"""scripts/fetch_books.py

Fetch books from the running API (``GET /books``) and print them or write
them to a JSON or CSV file. Filters map straight onto the endpoint's query
parameters.

Usage (PowerShell):
    $env:API_BASE_URL = 'http://localhost:8000'
    python ./scripts/fetch_books.py --genre Classic --sort -price --limit 5
    python ./scripts/fetch_books.py --out books.csv --format csv

"""
from __future__ import annotations
import argparse
import json
import os
from typing import Optional

import pandas as pd
import requests
from dotenv import load_dotenv


load_dotenv()


def try_get(url: str, params: Optional[dict] = None, timeout: int = 10) -> Optional[requests.Response]:
    try:
        return requests.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        print(f"Request to {url} failed: {e}")
        return None


def fetch_books(api_base: str, **filters) -> Optional[list]:
    """Fetch the books list endpoint; returns None when the API can't be read."""
    url = f"{api_base.rstrip('/')}/books"
    params = {k: v for k, v in filters.items() if v is not None}
    r = try_get(url, params=params)
    if r is None:
        return None
    if r.status_code != 200:
        print(f"Received {r.status_code} from {url}: {r.text}")
        return None
    try:
        data = r.json()
    except ValueError as e:
        print(f"Failed to parse JSON from {url}: {e}")
        return None
    if not isinstance(data, list):
        print("Expected a list from the books endpoint but got a single object.")
        return None
    return data


def flatten_for_csv(rows: list) -> pd.DataFrame:
    df = pd.DataFrame(rows)
    if "reviews" in df.columns:
        df["reviewCount"] = df["reviews"].apply(len)
        df = df.drop(columns=["reviews"])
    return df


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Fetch books from the API",
    )
    parser.add_argument(
        "--api-base",
        default=os.environ.get("API_BASE_URL", "http://localhost:8000"),
        help="API base URL",
    )
    parser.add_argument("--author", help="Only books by this author")
    parser.add_argument("--genre", help="Only books in this genre")
    parser.add_argument("--min-year", type=int, help="Published after this year")
    parser.add_argument("--max-price", type=float, help="Cheaper than this price")
    parser.add_argument("--sort", help="Sort keys, e.g. publicationYear,-price")
    parser.add_argument("--skip", type=int, default=0)
    parser.add_argument("--limit", type=int, default=0)
    parser.add_argument(
        "--out",
        help="Optional output file",
    )
    parser.add_argument(
        "--format",
        choices=("json", "csv"),
        default="json",
        help="Output format when --out is provided",
    )

    args = parser.parse_args(argv)

    rows = fetch_books(
        args.api_base,
        author=args.author,
        genre=args.genre,
        min_year=args.min_year,
        max_price=args.max_price,
        sort=args.sort,
        skip=args.skip,
        limit=args.limit,
    )
    if rows is None:
        return None

    if args.out:
        if args.format == "json":
            with open(args.out, "w", encoding="utf8") as fh:
                json.dump(rows, fh, ensure_ascii=False, indent=2)
            print(f"Wrote {len(rows)} books to {args.out}")
        else:
            flatten_for_csv(rows).to_csv(args.out, index=False)
            print(f"Wrote {len(rows)} books to {args.out} (CSV)")
    else:
        print(f"Fetched {len(rows)} books")
        for row in rows:
            print(f"  {row.get('title')} ({row.get('publicationYear')}) - {row.get('author')}: {row.get('price')}")
    return rows


if __name__ == "__main__":
    main()
