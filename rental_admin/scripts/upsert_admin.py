#!/usr/bin/env python3
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

APP_DIR = Path(__file__).resolve().parents[1]
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from db.base import Base
from db.engine import build_engine
from models.rental_models import Admin
from services.password_service import MIN_PASSWORD_LENGTH, hash_password


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create/update one admin login directly from terminal.",
    )
    parser.add_argument("--username", required=True, help="admin.username")
    parser.add_argument("--password", required=True, help="Password to store (salted PBKDF2 hash).")
    parser.add_argument(
        "--db-url",
        default=os.environ.get("DATABASE_URL", "").strip(),
        help="SQLAlchemy DB URL; defaults to DATABASE_URL env var.",
    )
    return parser


def upsert_admin(db: Session, username: str, password: str) -> tuple[Admin, bool]:
    admin = db.execute(select(Admin).where(Admin.username == username)).scalars().first()
    created = admin is None
    if created:
        admin = Admin(username=username, password=hash_password(password))
        db.add(admin)
    else:
        admin.password = hash_password(password)
    db.commit()
    db.refresh(admin)
    return admin, created


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username:
        parser.error("--username must not be empty")
    if len(args.password.strip()) < MIN_PASSWORD_LENGTH:
        parser.error(f"--password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if not args.db_url:
        parser.error("Missing DB URL. Set DATABASE_URL or pass --db-url.")

    engine = build_engine(args.db_url)
    Base.metadata.create_all(bind=engine)
    with Session(engine) as db:
        admin, created = upsert_admin(db, username, args.password.strip())

    print(f"OK username={admin.username} id={admin.id} {'created' if created else 'updated'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
