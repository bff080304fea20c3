#!/usr/bin/env python3
"""
Create a platform super-admin.

Super-admins cannot sign up through the API; this script inserts one
directly using the application's database settings.

Usage:
    python scripts/create_super_admin.py --email root@example.com --name "Root"

The password is read from --password or prompted for.
"""

import argparse
import asyncio
import getpass
import sys

from sqlalchemy import select

from app.core.security import get_password_hash
from app.db.base import async_session_maker, init_db
from app.models.super_admin import SuperAdmin


async def create_super_admin(name: str, email: str, password: str) -> SuperAdmin:
    await init_db()
    async with async_session_maker() as session:
        existing = await session.scalar(select(SuperAdmin).where(SuperAdmin.email == email))
        if existing is not None:
            raise ValueError(f"Super admin {email} already exists")

        admin = SuperAdmin(name=name, email=email, password_hash=get_password_hash(password))
        session.add(admin)
        await session.commit()
        await session.refresh(admin)
        return admin


def main():
    parser = argparse.ArgumentParser(description="Create a PipelineCRM super admin")
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--name", default="Super Admin", help="Display name")
    parser.add_argument("--password", help="Password (prompted if omitted)")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("Error: password must be at least 8 characters")
        sys.exit(1)

    try:
        admin = asyncio.run(create_super_admin(args.name, args.email, password))
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Created super admin {admin.email} ({admin.id})")


if __name__ == "__main__":
    main()
