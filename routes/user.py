# routes/user.py
from fastapi import APIRouter, Depends
from models.user import UserCreate, UserLogin, UserUpdate, PasswordChange, Role
from database import users, bookings
from pymongo.errors import DuplicateKeyError
from utils.auth import get_current_user, get_current_user_admin, pwd_context
from utils.dates import utcnow
from utils.errors import Unauthenticated, ValidationFailed
from utils.logger import logger
from utils.serialize import serialize_doc

router = APIRouter()


def _public_user(user: dict) -> dict:
    return serialize_doc({
        "_id": user["_id"],
        "name": user["name"],
        "email": user["email"],
        "role": user.get("role", Role.user.value),
        "last_login": user.get("last_login"),
        "created_at": user.get("created_at"),
    })


def _insert_user(user_in: UserCreate, role: Role) -> dict:
    email = user_in.email.lower()
    if users.find_one({"email": email}):
        raise ValidationFailed("User already exists with this email address")
    now = utcnow()
    user_doc = {
        "name": user_in.name.strip(),
        "email": email,
        "password": pwd_context.hash(user_in.password),
        "role": role.value,
        "is_active": True,
        "last_login": now,
        "created_at": now,
    }
    try:
        result = users.insert_one(user_doc)
    except DuplicateKeyError:
        raise ValidationFailed("User already exists with this email address")
    user_doc["_id"] = result.inserted_id
    logger.info(f"Registered {role.value} {email}")
    return user_doc


# === Register (role user) ===
@router.post("/register", status_code=201)
async def register(user_in: UserCreate):
    user = _insert_user(user_in, Role.user)
    return {
        "status": "success",
        "message": "User registered successfully",
        "data": {"user": _public_user(user)},
    }


# === Register admin (ADMIN ONLY) ===
@router.post("/register-admin", status_code=201)
async def register_admin(user_in: UserCreate, current_admin=Depends(get_current_user_admin)):
    user = _insert_user(user_in, Role.admin)
    return {
        "status": "success",
        "message": "Admin registered successfully",
        "data": {"user": _public_user(user)},
    }


# === Login ===
@router.post("/login")
async def login(user_in: UserLogin):
    user = users.find_one({"email": user_in.email.lower()})
    if not user or not pwd_context.verify(user_in.password, user["password"]):
        raise Unauthenticated("Invalid email or password")
    if not user.get("is_active", True):
        raise Unauthenticated("Account has been deactivated. Please contact support.")

    now = utcnow()
    users.update_one({"_id": user["_id"]}, {"$set": {"last_login": now}})
    user["last_login"] = now
    return {
        "status": "success",
        "message": "Login successful",
        # clients send data.user.id back as X-User-ID
        "data": {"user": _public_user(user)},
    }


@router.get("/me")
async def get_me(current_user=Depends(get_current_user)):
    profile = _public_user(current_user)
    profile["booking_count"] = bookings.count_documents({"user_id": current_user["_id"]})
    return {"status": "success", "data": {"user": profile}}


@router.put("/me")
async def update_me(update_data: UserUpdate, current_user=Depends(get_current_user)):
    update_fields = {}
    if update_data.name is not None:
        if not update_data.name.strip():
            raise ValidationFailed("Name cannot be empty")
        update_fields["name"] = update_data.name.strip()
    if update_data.email is not None:
        email = update_data.email.lower()
        if email != current_user["email"]:
            if users.find_one({"email": email, "_id": {"$ne": current_user["_id"]}}):
                raise ValidationFailed("Email address is already in use")
            update_fields["email"] = email

    if update_fields:
        users.update_one({"_id": current_user["_id"]}, {"$set": update_fields})
    user = users.find_one({"_id": current_user["_id"]})
    return {
        "status": "success",
        "message": "Profile updated successfully",
        "data": {"user": _public_user(user)},
    }


@router.put("/change-password")
async def change_password(payload: PasswordChange, current_user=Depends(get_current_user)):
    user = users.find_one({"_id": current_user["_id"]})
    if not pwd_context.verify(payload.current_password, user["password"]):
        raise ValidationFailed("Current password is incorrect")
    users.update_one(
        {"_id": user["_id"]},
        {"$set": {"password": pwd_context.hash(payload.new_password)}},
    )
    return {"status": "success", "message": "Password changed successfully"}


@router.post("/logout")
async def logout(current_user=Depends(get_current_user)):
    return {
        "status": "success",
        "message": "Logged out successfully. Please discard the stored user id on the client.",
    }
