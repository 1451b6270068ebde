# utils/auth.py
from fastapi import Depends, Header
from passlib.context import CryptContext
from database import users
from bson import ObjectId

from models.user import Role
from utils.errors import Forbidden, Unauthenticated

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_current_user(x_user_id: str = Header(None, alias="X-User-ID")):
    if not x_user_id:
        raise Unauthenticated("Access denied. X-User-ID header is required.")
    if not ObjectId.is_valid(x_user_id):
        raise Unauthenticated("Invalid X-User-ID (must be an ObjectId hex string)")

    # Role always comes from the stored user, never from the request
    user = users.find_one({"_id": ObjectId(x_user_id)}, {"password": 0})
    if not user:
        raise Unauthenticated("User no longer exists")
    if not user.get("is_active", True):
        raise Unauthenticated("User account has been deactivated")
    return user


def get_current_user_admin(user=Depends(get_current_user)):
    if user.get("role") != Role.admin.value:
        raise Forbidden("Access denied. Admin privileges required.")
    return user


def is_admin(user: dict) -> bool:
    return user.get("role") == Role.admin.value


def ensure_owner_or_admin(owner_id, user: dict, message: str = "You can only access your own resources."):
    if is_admin(user):
        return
    if str(owner_id) != str(user["_id"]):
        raise Forbidden(f"Access denied. {message}")
