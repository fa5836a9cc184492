"""
User accounts: registration, login, password reset, profile and roles.
"""

from typing import Optional

from core.logging import get_logger
from core.security import TokenError, create_token, decode_token, hash_password, verify_password
from core.storage import BaseStore, DuplicateKeyError, UserRecord, UserRole
from services.errors import (
    AuthenticationFailed,
    Conflict,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from services.text import normalize_email


logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


class AccountService:
    """
    Account lifecycle on top of the user repository.

    Passwords and security answers are only ever stored as bcrypt hashes.
    """

    def __init__(self, store: BaseStore):
        self._users = store.users

    async def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: str,
        address: str,
        answer: str,
    ) -> UserRecord:
        email = normalize_email(email)
        if await self._users.get_by_email(email) is not None:
            raise Conflict("Already Register please login")

        record = UserRecord(
            name=name.strip(),
            email=email,
            password=hash_password(password),
            phone=phone.strip(),
            address=address.strip(),
            answer=hash_password(answer),
        )
        try:
            await self._users.create(record)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration
            raise Conflict("Already Register please login") from None

        logger.info("User registered", user_id=record.id)
        return record

    async def login(self, email: str, password: str) -> tuple[UserRecord, str]:
        """Check credentials and issue a token."""
        user = await self._users.get_by_email(normalize_email(email))
        if user is None:
            raise NotFound("Email is not registered")
        if not verify_password(password, user.password):
            logger.info("Login rejected", user_id=user.id)
            raise ValidationFailed("Invalid Password")

        token = create_token(user.id)
        logger.info("User logged in", user_id=user.id)
        return user, token

    async def reset_password(self, email: str, answer: str, new_password: str) -> None:
        user = await self._users.get_by_email(normalize_email(email))
        if user is None or not verify_password(answer, user.answer):
            raise NotFound("Wrong Email Or Answer")

        await self._users.update(user.id, {"password": hash_password(new_password)})
        logger.info("Password reset", user_id=user.id)

    async def authenticate(self, token: Optional[str]) -> UserRecord:
        """Resolve a bearer token to its user."""
        if not token:
            raise AuthenticationFailed("Invalid token")
        try:
            claims = decode_token(token)
        except TokenError as e:
            logger.debug("Token rejected", reason=str(e))
            raise AuthenticationFailed("Invalid token") from None

        user = await self._users.get(claims["_id"])
        if user is None:
            raise AuthenticationFailed("Invalid token")
        return user

    @staticmethod
    def require_admin(user: UserRecord) -> UserRecord:
        if not user.is_admin:
            raise PermissionDenied("Unauthorized Access")
        return user

    async def update_profile(
        self,
        user: UserRecord,
        *,
        name: Optional[str] = None,
        password: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> UserRecord:
        """Change the given fields; None or blank leaves a field as it is."""
        if password and len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed("Password must be at least 6 characters long")

        fields: dict[str, str] = {}
        if name and name.strip():
            fields["name"] = name.strip()
        if password:
            fields["password"] = hash_password(password)
        if phone and phone.strip():
            fields["phone"] = phone.strip()
        if address and address.strip():
            fields["address"] = address.strip()

        if not fields:
            return user

        updated = await self._users.update(user.id, fields)
        if updated is None:
            raise AuthenticationFailed("Invalid token")

        logger.info("Profile updated", user_id=user.id, fields=sorted(fields))
        return updated

    async def set_role(self, email: str, role: UserRole) -> UserRecord:
        user = await self._users.get_by_email(normalize_email(email))
        if user is None:
            raise NotFound("Email is not registered")
        updated = await self._users.update(user.id, {"role": int(role)})
        logger.info("Role changed", user_id=user.id, role=role.name)
        return updated
