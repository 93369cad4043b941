"""
Authentication and user administration business logic.

Users live in the shared store. Each user's kingdom data lives in a tenant
store that is provisioned at registration, or lazily on first access for
users created before it existed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select

from kingdom.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from kingdom.db.models import User, UserDatabase
from kingdom.exceptions import ConflictError, NotFoundError, ProvisioningError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from kingdom.tenancy.registry import TenantRegistry

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by username."""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession) -> list[tuple[User, str | None]]:
    """All users, newest first, with their tenant database name."""
    result = await db.execute(
        select(User, UserDatabase.database_name)
        .outerjoin(UserDatabase, UserDatabase.user_id == User.id)
        .order_by(User.created_at.desc(), User.id.desc())
    )
    return [(user, database_name) for user, database_name in result.all()]


def _check_password(password: str) -> None:
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationError(str(e)) from e


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User | None:
    """Return the user when the credentials match, else None.

    Hashes produced with older argon2 parameters are upgraded on success.
    """
    user = await get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password):
        logger.info("login_failed", username=username)
        return None

    if check_needs_rehash(user.password):
        user.password = hash_password(password)
        await db.commit()
    return user


async def ensure_admin_user(db: AsyncSession, username: str, password: str) -> User | None:
    """Create the bootstrap admin when no admin exists yet.

    Returns:
        The created admin, or None when an admin already exists.
    """
    result = await db.execute(select(User).where(User.is_admin.is_(True)).limit(1))
    if result.scalar_one_or_none() is not None:
        return None

    admin = User(username=username, password=hash_password(password), is_admin=True)
    db.add(admin)
    await db.commit()
    logger.info("admin_bootstrapped", user_id=admin.id, username=username)
    return admin


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    registry: TenantRegistry,
    username: str,
    password: str,
) -> tuple[User, str]:
    """
    Create a user and provision their tenant store.

    Returns:
        Tuple of (user, database_name).

    Raises:
        ValidationError: If the password is too short or too long.
        ConflictError: If the username is taken.
        ProvisioningError: If the store could not be created; the user is removed again.
    """
    _check_password(password)
    if await get_user_by_username(db, username) is not None:
        msg = "Username already exists"
        raise ConflictError(msg)

    user = User(username=username, password=hash_password(password), is_admin=False)
    db.add(user)
    await db.commit()

    try:
        store = await registry.resolve(user.id)
    except ProvisioningError:
        await db.delete(user)
        await db.commit()
        logger.error("user_registration_rolled_back", user_id=user.id, username=username)
        raise

    logger.info("user_registered", user_id=user.id, username=username, database_name=store.database_name)
    return user, store.database_name


async def update_user(
    db: AsyncSession,
    user_id: int,
    username: str,
    password: str | None = None,
    is_admin: bool = False,
) -> User:
    """
    Update a user's name, admin flag and, when given, password.

    Raises:
        NotFoundError: If the user does not exist.
        ConflictError: If another user has the username.
        ValidationError: If the new password is too short or too long.
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)

    result = await db.execute(select(User.id).where(User.username == username).where(User.id != user_id))
    if result.scalar_one_or_none() is not None:
        msg = "Username already exists"
        raise ConflictError(msg)

    if password:
        _check_password(password)
        user.password = hash_password(password)
    user.username = username
    user.is_admin = is_admin
    await db.commit()
    return user


async def delete_user(db: AsyncSession, registry: TenantRegistry, user_id: int) -> None:
    """
    Delete a non-admin user and their store mapping. The store file is kept.

    Raises:
        NotFoundError: If the user does not exist.
        ValidationError: If the user is an admin.
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    if user.is_admin:
        msg = "Cannot delete admin user"
        raise ValidationError(msg)

    await db.execute(delete(UserDatabase).where(UserDatabase.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    await registry.evict(user_id)
    logger.info("user_deleted", user_id=user_id)
