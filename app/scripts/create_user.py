"""
Create a user (e.g. the portfolio admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD EMAIL [--admin]
Example:
  python -m app.scripts.create_user admin your-secure-password you@example.com --admin
"""
import argparse
import logging
import sys

from app.core.database import SessionLocal, init_db
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    hash_password,
)
from app.models.user import User


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a portfolio user (no registration UI).")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("email", help="Address that receives login OTPs")
    parser.add_argument("--admin", action="store_true", help="Grant admin access")
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print("Password must be 8-128 characters.", file=sys.stderr)
        return 1
    email = args.email.strip()
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1

    if not init_db():
        print("Database is not reachable; see log output.", file=sys.stderr)
        return 1
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == username).first()
        if existing:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        user = User(
            username=username,
            password_hash=hash_password(args.password),
            email=email,
            is_admin=args.admin,
        )
        db.add(user)
        db.commit()
        role = "admin" if args.admin else "user"
        print(f"Created {role} '{username}' ({email}).")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    sys.exit(main())
