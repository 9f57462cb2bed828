"""
Bootstrap seed script - creates the first approved administrator.

Every new admin registers as pending and needs an already-approved admin to
let them in, so the very first one has to be approved out of band:

    python seed_admin.py --email owner@example.com --first-name Anna --last-name Petrova

The password is read from --password or prompted for. Run it against the same
DATABASE_URL as the server; tables are created if they do not exist yet.
"""
import argparse
import getpass
import sys
from datetime import datetime

from airdealer.config import settings
from airdealer.database import SessionLocal, init_db
from airdealer.exceptions import AirDealerError, AlreadyRegistered
from airdealer.identity.local import LocalIdentityProvider
from airdealer.services.access_gate import ADMINS_TABLE, AccessGate
from airdealer.store.sqlalchemy_store import SQLAlchemyRecordStore


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create (or approve) the first AirDealer administrator")
    parser.add_argument("--email", required=True)
    parser.add_argument("--first-name", required=True)
    parser.add_argument("--last-name", required=True)
    parser.add_argument("--password", help="prompted for when omitted")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    password = args.password or getpass.getpass("Password: ")
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        print(f"  ❌ Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")
        sys.exit(1)

    init_db()
    db = SessionLocal()
    try:
        store = SQLAlchemyRecordStore(db)
        gate = AccessGate(store, LocalIdentityProvider(store))

        try:
            record = gate.register(args.email, password, args.first_name, args.last_name)
            print(f"  ✓ Registered {record['email']} (admin #{record['id']})")
        except AlreadyRegistered:
            identity = gate.identities.sign_in(args.email, password)
            gate.identities.sign_out()
            record = store.find_one(ADMINS_TABLE, {"identity_id": identity.id})
            print(f"  ✓ {record['email']} already registered (admin #{record['id']})")

        store.update(ADMINS_TABLE, {"id": record["id"]}, {"is_approved": True, "updated_at": datetime.utcnow()})
        print(f"  ✓ Approved admin #{record['id']}. Sign in with POST /auth/login")
    except AirDealerError as e:
        print(f"  ❌ {e.code}: {e.message}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
