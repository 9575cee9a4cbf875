#!/usr/bin/env python3
"""
Database initialization script
"""
import asyncio
import sys
from pathlib import Path

# Add the project root to the Python path
current_dir = Path(__file__).parent
root_dir = current_dir.parent
sys.path.insert(0, str(root_dir))

ADMIN_PASSWORD = "Admin123!"
DEMO_PASSWORD = "Password123!"

DEMO_USERS = [
    {"username": "john_doe", "email": "john@example.com", "full_name": "John Doe", "bio": "Software Developer"},
    {"username": "jane_smith", "email": "jane@example.com", "full_name": "Jane Smith", "bio": "Product Manager"},
    {"username": "bob_wilson", "email": "bob@example.com", "full_name": "Bob Wilson", "bio": "DevOps Engineer"},
]

async def init_database() -> None:
    """Initialize database with tables"""
    from social_network.db.session import init_db
    from social_network.config import settings

    print(f"🚀 Initializing database: {settings.database_url}")

    try:
        await init_db()
        print("✅ Database initialized successfully")

        await create_initial_data()

    except Exception as e:
        print(f"❌ Error initializing database: {e}")
        sys.exit(1)

async def create_initial_data() -> None:
    """Create the admin account and a few connected demo users"""
    from social_network.db.session import AsyncSessionLocal
    from social_network.exceptions import SocialNetworkError
    from social_network.models.user import UserRole
    from social_network.schemas.user_schema import UserCreate
    from social_network.services.auth_service import AuthService
    from social_network.services.relationship_service import RelationshipService
    from social_network.services.user_service import UserService

    print("👤 Creating initial data...")

    async with AsyncSessionLocal() as db:
        try:
            auth_service = AuthService(db)
            user_service = UserService(db)

            if not await user_service.get_user_by_username("admin"):
                admin = await auth_service.create_user(
                    UserCreate(
                        username="admin",
                        email="admin@example.com",
                        password=ADMIN_PASSWORD,
                        full_name="Administrator",
                        bio="System Administrator",
                    ),
                    role=UserRole.ADMIN,
                )
                print(f"✅ Created admin user: {admin.username}")

            demo = []
            created_count = 0
            for user_data in DEMO_USERS:
                user = await user_service.get_user_by_username(user_data["username"])
                if not user:
                    user = await auth_service.create_user(UserCreate(password=DEMO_PASSWORD, **user_data))
                    created_count += 1
                demo.append(user)

            if created_count > 0:
                print(f"✅ Created {created_count} demo users")

            # john and jane become friends, bob follows john
            relationships = RelationshipService(db)
            john, jane, bob = demo
            for requester, target in ((john, jane), (jane, john), (bob, john)):
                try:
                    await relationships.add_friend(requester.id, target.id)
                except SocialNetworkError as e:
                    print(f"ℹ️  {requester.username} -> {target.username}: {e.message}")

        except Exception as e:
            await db.rollback()
            print(f"⚠️  Error creating initial data: {e}")

async def check_database_connection() -> bool:
    """Check if database is accessible"""
    from social_network.db.session import engine
    from sqlalchemy import text

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print("✅ Database connection successful")
        return True
    except Exception as e:
        print(f"❌ Database connection failed: {e}")
        return False

async def drop_database(confirm: bool = False) -> None:
    """Drop all database tables"""
    if not confirm:
        print("⚠️  WARNING: This will drop ALL tables and data!")
        print("   Use --confirm flag to proceed")
        return

    from social_network.db.session import drop_db

    try:
        await drop_db()
        print("✅ Database dropped successfully")
    except Exception as e:
        print(f"❌ Error dropping database: {e}")

def migrate_database(revision: str) -> None:
    """Apply Alembic migrations up to ``revision``"""
    from social_network.db.migrations import run_migrations

    print(f"🔧 Upgrading database to revision: {revision}")
    run_migrations(revision=revision)
    print("✅ Database upgraded successfully")

async def migration_status() -> bool:
    from social_network.db.migrations import check_migration_status

    up_to_date = await check_migration_status()
    print("✅ Database is up to date" if up_to_date else "⚠️  Database has pending migrations")
    return up_to_date

def main() -> None:
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="Database Initialization")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Initialize database")
    subparsers.add_parser("check", help="Check database connection")

    drop_parser = subparsers.add_parser("drop", help="Drop database (DANGEROUS!)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm drop")

    subparsers.add_parser("seed", help="Seed initial data")

    reset_parser = subparsers.add_parser("reset", help="Drop and reinitialize")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm reset")

    migrate_parser = subparsers.add_parser("migrate", help="Apply Alembic migrations")
    migrate_parser.add_argument("revision", nargs="?", default="head", help="Target revision")

    subparsers.add_parser("status", help="Check whether migrations are up to date")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "init":
            asyncio.run(init_database())

        elif args.command == "check":
            success = asyncio.run(check_database_connection())
            sys.exit(0 if success else 1)

        elif args.command == "drop":
            asyncio.run(drop_database(args.confirm))

        elif args.command == "seed":
            asyncio.run(create_initial_data())

        elif args.command == "reset":
            if not args.confirm:
                print("⚠️  WARNING: This will drop ALL tables and data!")
                print("   Use --confirm flag to proceed")
                return

            asyncio.run(drop_database(True))
            asyncio.run(init_database())

        elif args.command == "migrate":
            migrate_database(args.revision)

        elif args.command == "status":
            up_to_date = asyncio.run(migration_status())
            sys.exit(0 if up_to_date else 1)

    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
