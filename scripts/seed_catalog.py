#!/usr/bin/env python
"""CLI utility to load the demo product catalog and, optionally, an admin account."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from storefront.core.database import engine, session_scope
from storefront.models import Base
from storefront.services.maintenance import MaintenanceService


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the storefront database with demo products.")
    parser.add_argument("--create-schema", action="store_true", help="Create missing tables before seeding.")
    parser.add_argument("--admin-email", default=None, help="Also ensure an admin account with this email exists.")
    parser.add_argument("--admin-password", default=None, help="Password for --admin-email.")
    parser.add_argument("--admin-name", default="Administrator", help="Display name for --admin-email.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if bool(args.admin_email) != bool(args.admin_password):
        logging.error("--admin-email and --admin-password must be given together")
        return 2

    try:
        if args.create_schema:
            Base.metadata.create_all(bind=engine)
        with session_scope() as session:
            service = MaintenanceService(session)
            if args.admin_email:
                service.ensure_bootstrap_admin(
                    email=args.admin_email,
                    password=args.admin_password,
                    name=args.admin_name,
                )
            created = service.seed_catalog(enforce=False)
    except SQLAlchemyError as exc:
        logging.error("Seeding failed: %s", exc)
        return 1

    logging.info("Database seeded successfully. Created %s products.", created)
    return 0


if __name__ == "__main__":
    sys.exit(main())
