# utils/serialize.py
from datetime import datetime, date
from bson import ObjectId

from utils.errors import ValidationFailed


def serialize_doc(obj):
    """Make a Mongo document JSON friendly: ObjectId -> str, dates -> ISO, _id -> id."""
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if k == "_id":
                out["id"] = serialize_doc(v)
            elif k == "password":
                continue
            else:
                out[k] = serialize_doc(v)
        return out
    if isinstance(obj, list):
        return [serialize_doc(i) for i in obj]
    return obj


def parse_object_id(value: str, label: str = "ID") -> ObjectId:
    if not ObjectId.is_valid(value):
        raise ValidationFailed(f"Invalid {label} format")
    return ObjectId(value)
