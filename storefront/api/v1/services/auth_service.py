from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storefront.api.v1.models.user_models import RoleEnum, User
from storefront.auth.auth import hash_password, verify_password
from storefront.core.exceptions import Unauthorized, ValidationError
from storefront.core.logging import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def set_password(user: User, password: str) -> None:
    """Hash and store a new password. Always re-hashes."""
    user.password_hash = hash_password(password)


async def get_user_by_email(email: str, db: AsyncSession):
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def register_user(name: str, email: str, password: str, db: AsyncSession, role: RoleEnum = RoleEnum.customer):
    if await get_user_by_email(email, db):
        raise ValidationError("User already exists with this email")

    user = User(name=name, email=normalize_email(email), role=role)
    set_password(user, password)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise ValidationError("User already exists with this email")
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, role=user.role.value)
    return user


async def authenticate_user(email: str, password: str, db: AsyncSession):
    if not email or not password:
        raise ValidationError("Please provide email and password")

    user = await get_user_by_email(email, db)
    if not user or not verify_password(password, user.password_hash):
        logger.info("login_failed")
        raise Unauthorized("Invalid email or password")
    return user
