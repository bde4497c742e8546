"""
Identity service module for the Taskboard API
Handles registration, authentication and profile lookups
"""
from typing import Tuple

from sqlalchemy.exc import IntegrityError

from ..models.user import User, UserCreate
from ..storage import Store
from ..utils.errors import (
    AppException,
    DuplicateIdentityException,
    InvalidCredentialsException,
    UserNotFoundException,
)
from ..utils.logging import get_logger, log_error
from ..utils.security import create_access_token, hash_password, verify_password
from ..utils.timeutils import utcnow
from .category_service import CategoryService

logger = get_logger("services.identity")


class IdentityService:
    """Service class for user identity operations"""

    @staticmethod
    def register(store: Store, user_data: UserCreate) -> User:
        """
        Register a new user and seed their default categories.

        The user row and the default categories are written in one transaction.

        Args:
            store: Storage unit of work
            user_data: Validated registration fields (email already lower-cased)

        Returns:
            Created User object

        Raises:
            DuplicateIdentityException: If the email or username is taken
        """
        try:
            if store.users.get_by_email(user_data.email):
                raise DuplicateIdentityException()
            if store.users.get_by_username(user_data.username):
                raise DuplicateIdentityException()

            user = User(
                email=user_data.email,
                username=user_data.username,
                hashed_password=hash_password(user_data.password),
            )
            store.users.add(user)
            CategoryService.seed_defaults(store, user.id, commit=False)
            store.commit()
            logger.info("Registered user id=%s", user.id)
            return user
        except IntegrityError:
            store.rollback()
            raise DuplicateIdentityException()
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, "IdentityService.register")
            store.rollback()
            raise

    @staticmethod
    def authenticate(store: Store, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials, stamp last_login and issue an access token.

        Returns:
            The authenticated User and a signed token

        Raises:
            InvalidCredentialsException: If no active user matches the email/password
        """
        try:
            user = store.users.get_by_email(email)
            if user is None or not user.is_active:
                raise InvalidCredentialsException()
            if not verify_password(password, user.hashed_password):
                raise InvalidCredentialsException()

            user.last_login = utcnow()
            store.users.save(user)
            store.commit()
            logger.info("User id=%s logged in", user.id)
            return user, create_access_token(user.id)
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, "IdentityService.authenticate")
            store.rollback()
            raise

    @staticmethod
    def get_profile(store: Store, user_id: int) -> User:
        """
        Get a user's profile.

        Raises:
            UserNotFoundException: If no such user exists
        """
        user = store.users.get(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    @staticmethod
    def change_password(store: Store, user_id: int, current_password: str, new_password: str) -> User:
        """
        Replace a user's password after checking the current one.

        Raises:
            UserNotFoundException: If no such user exists
            InvalidCredentialsException: If current_password does not match
        """
        try:
            user = IdentityService.get_profile(store, user_id)
            if not verify_password(current_password, user.hashed_password):
                raise InvalidCredentialsException("Current password is incorrect")

            user.hashed_password = hash_password(new_password)
            user.updated_at = utcnow()
            store.users.save(user)
            store.commit()
            logger.info("User id=%s changed password", user_id)
            return user
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, "IdentityService.change_password", user_id)
            store.rollback()
            raise


__all__ = ["IdentityService"]
