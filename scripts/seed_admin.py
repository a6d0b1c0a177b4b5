"""
Admin Seeding Utility for the Hostel Complaint Desk
Admins cannot sign up through the API; this script creates one.

Usage:
    python -m scripts.seed_admin --email admin@bitmesra.ac.in --password admin1234
    python -m scripts.seed_admin --email admin@bitmesra.ac.in --password admin1234 --db data/complaints.db
"""
import argparse

import config
from auth_utils import hash_password
from db_config import init_database
from services.complaint_config import ROLE_ADMIN, MIN_PASSWORD_LENGTH
from services.identity_store import IdentityStore


def seed_admin(db_path: str, email: str, password: str) -> tuple:
    """
    Create an admin account unless one already exists for the email.

    Returns:
        (created: bool, admin_id: int)
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    email = email.strip().lower()
    init_database(db_path)
    identities = IdentityStore(db_path)

    existing = identities.get_by_email(ROLE_ADMIN, email)
    if existing:
        return False, existing['id']

    return True, identities.create_admin(email, hash_password(password))


def main():
    parser = argparse.ArgumentParser(description='Create an admin account')
    parser.add_argument('--email', required=True, help='Admin email address')
    parser.add_argument('--password', required=True, help='Admin password (min 8 characters)')
    parser.add_argument('--db', default=config.DATABASE_PATH, help='Path to the SQLite database')

    args = parser.parse_args()

    try:
        created, admin_id = seed_admin(args.db, args.email, args.password)
    except ValueError as e:
        parser.error(str(e))
        return

    if created:
        print(f"✅ Admin created successfully! (id={admin_id})")
        print(f"   Email: {args.email.strip().lower()}")
    else:
        print(f"⚠️ Admin already exists with email: {args.email} (id={admin_id})")


if __name__ == "__main__":
    main()
