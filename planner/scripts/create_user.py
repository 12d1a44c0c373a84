"""
Create a user (e.g. first admin). Run from project root:
  python -m planner.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m planner.scripts.create_user admin admin@example.com 'Secure-pass1' admin
"""
import argparse
import logging
import sys

from planner.core.config import get_settings
from planner.core.database import session_scope
from planner.core.logging import configure_logging
from planner.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    PasswordHasher,
)
from planner.models.user import UserRole
from planner.services.credentials import normalize_email
from planner.stores.user_store import DuplicateUserError, SqlAlchemyUserStore

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a release planner user.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.USER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    username = args.username.strip()
    email = normalize_email(args.email)
    if not USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    with session_scope() as db:
        store = SqlAlchemyUserStore(db)
        if store.find_by_username(username) or store.find_by_email(email):
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        hasher = PasswordHasher(settings.BCRYPT_ROUNDS)
        try:
            user = store.create(
                username=username,
                email=email,
                password_hash=hasher.hash(args.password),
                role=args.role,
                is_active=True,
            )
        except DuplicateUserError:
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        logger.info("Created user id=%s", user.id)
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
