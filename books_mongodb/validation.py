"""Client-side validation of book documents.

The server-side ``$jsonSchema`` validator in :mod:`books_mongodb.schema` is
written in BSON types. Before a write we translate it to a plain JSON Schema
and check the document with ``jsonschema`` so malformed books are rejected
with a readable message even when the collection has no validator attached.
"""
import jsonschema
from jsonschema import Draft7Validator, FormatChecker

from . import schema as books_schema_module


class BookValidationError(ValueError):
    """Raised when a document does not match the books schema."""


_BSON_TO_JSON_TYPES = {
    "string": "string",
    "int": "integer",
    "long": "integer",
    "double": "number",
    "decimal": "number",
    "bool": "boolean",
    "array": "array",
    "object": "object",
    "null": "null",
}

# keywords copied through unchanged
_PASSTHROUGH = ("minimum", "maximum", "minLength", "maxLength", "minItems", "maxItems")

_JSON_SCHEMA_CACHE: dict = {}


def _bson_to_jsonschema(bson_schema: dict) -> dict:
    bson_type = bson_schema.get("bsonType")
    types = bson_type if isinstance(bson_type, list) else [bson_type]
    json_types = []
    out: dict = {}
    for t in types:
        if t is None:
            continue
        if t == "date":
            json_types.append("string")
            out["format"] = "date"
            continue
        json_type = _BSON_TO_JSON_TYPES.get(t, "string")
        if json_type not in json_types:
            json_types.append(json_type)
    if json_types:
        out["type"] = json_types[0] if len(json_types) == 1 else json_types

    for key in _PASSTHROUGH:
        if key in bson_schema:
            out[key] = bson_schema[key]

    if "properties" in bson_schema:
        out["properties"] = {
            name: _bson_to_jsonschema(prop) for name, prop in bson_schema["properties"].items()
        }
    if "required" in bson_schema:
        out["required"] = list(bson_schema["required"])
    if "items" in bson_schema:
        out["items"] = _bson_to_jsonschema(bson_schema["items"])
    return out


def get_json_schema(schema_name: str) -> dict:
    if schema_name not in _JSON_SCHEMA_CACHE:
        bson_sch = getattr(books_schema_module, schema_name, None)
        if bson_sch is None:
            raise KeyError(f"Unknown schema: {schema_name}")
        _JSON_SCHEMA_CACHE[schema_name] = _bson_to_jsonschema(bson_sch)
    return _JSON_SCHEMA_CACHE[schema_name]


def _is_bson_int(checker, instance) -> bool:
    # bsonType int rejects 1951.0, unlike JSON Schema's "integer"
    return isinstance(instance, int) and not isinstance(instance, bool)


_BookValidator = jsonschema.validators.extend(
    Draft7Validator,
    type_checker=Draft7Validator.TYPE_CHECKER.redefine("integer", _is_bson_int),
)


def _validate(doc: dict, schema_name: str) -> dict:
    validator = _BookValidator(get_json_schema(schema_name), format_checker=FormatChecker())
    try:
        validator.validate(doc)
    except jsonschema.ValidationError as e:
        raise BookValidationError(e.message) from e
    return doc


def validate_book(doc: dict) -> dict:
    # the store assigns _id; it is not part of the schema
    candidate = {k: v for k, v in doc.items() if k != "_id"}
    _validate(candidate, "books_schema")
    return doc


def validate_review(review: dict) -> dict:
    return _validate(review, "review_schema")
