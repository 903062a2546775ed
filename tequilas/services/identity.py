"""
Identity Service

Registration, login and admin seeding.

Registration enforces:
- Well-formed email (RegisterRequest schema)
- Unique user name and email (case-insensitive)
- Password policy: at least 6 characters with a digit, a lowercase letter,
  an uppercase letter and a non-alphanumeric character

Version: 1.0.0
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tequilas.core.config import get_settings
from tequilas.core.errors import Unauthenticated, ValidationFailed
from tequilas.core.security import hash_password, issue_token, verify_password
from tequilas.models import User
from tequilas.repositories import UserRepository
from tequilas.schemas import LoginResponse, RegisterRequest, RegisterResponse

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def password_policy_errors(password: str) -> list[str]:
    """
    Check a password against the policy.

    Returns:
        list: Human readable descriptions, empty when the password is acceptable
    """
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.")
    if not any(c.isdigit() for c in password):
        errors.append("Passwords must have at least one digit ('0'-'9').")
    if not any(c.islower() for c in password):
        errors.append("Passwords must have at least one lowercase ('a'-'z').")
    if not any(c.isupper() for c in password):
        errors.append("Passwords must have at least one uppercase ('A'-'Z').")
    if all(c.isalnum() for c in password):
        errors.append("Passwords must have at least one non alphanumeric character.")
    return errors


class IdentityService:
    """
    User accounts and bearer tokens.

    Example:
        >>> service = IdentityService(db)
        >>> await service.register(RegisterRequest(user_name="jane", email="j@x.io", password="S3cret!x"))
        >>> login = await service.login("j@x.io", "S3cret!x")
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    async def register(self, request: RegisterRequest) -> RegisterResponse:
        """
        Create an account without roles.

        Raises:
            ValidationFailed: Policy violations or duplicates, all listed in `errors`
        """
        errors = []
        if await self.users.find_by_user_name(request.user_name):
            errors.append(f"Username '{request.user_name}' is already taken.")
        if await self.users.find_by_email(request.email):
            errors.append(f"Email '{request.email}' is already taken.")
        errors.extend(password_policy_errors(request.password))

        if errors:
            raise ValidationFailed("Registration failed", extra={"errors": errors})

        user = User(
            user_name=request.user_name,
            email=request.email,
            password_hash=hash_password(request.password),
        )
        try:
            await self.users.add(user)
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            await self.db.rollback()
            raise ValidationFailed(
                "Registration failed",
                extra={"errors": ["User name or email is already taken."]},
            )

        logger.info(f"Registered user #{user.id} ({user.email})")
        return RegisterResponse(message="User registered successfully", user_id=user.id)

    async def login(self, email: str, password: str) -> LoginResponse:
        """
        Verify credentials and issue a bearer token.

        Raises:
            Unauthenticated: Unknown email or wrong password
        """
        user = await self.users.find_by_email(email)
        if user is None or not verify_password(user.password_hash, password):
            logger.info(f"Failed login for {email}")
            raise Unauthenticated("Invalid email or password")

        issued = issue_token(
            user_id=user.id,
            email=user.email,
            user_name=user.user_name,
            roles=user.role_names,
        )
        logger.debug(f"Issued token for user #{user.id}, expires {issued.expires_at}")

        return LoginResponse(
            token=issued.token,
            expiration=issued.expires_at,
            email=user.email,
            user_name=user.user_name,
            roles=sorted(issued.claims.roles),
        )

    async def seed_admin(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """
        Ensure the admin role exists and the admin account holds it.

        Idempotent: an existing account keeps its password.
        """
        settings = get_settings()
        email = email or settings.admin_email
        password = password or settings.admin_password

        role = await self.users.get_or_create_role(settings.admin_role)
        user = await self.users.find_by_email(email)

        if user is None:
            user = User(
                user_name=email,
                email=email,
                password_hash=hash_password(password),
                roles=[role],
            )
            await self.users.add(user)
            logger.info(f"👤 Seeded admin user {email}")
        elif role not in user.roles:
            user.roles.append(role)
            logger.info(f"👤 Granted {settings.admin_role} role to {email}")

        await self.db.commit()
        return user
