"""Reset the back-office database (useful for testing)."""

from cafe_backoffice.config import get_settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.utils.logging import setup_logging


def reset_all_state() -> None:
    """Drop and recreate every table."""
    settings = get_settings()
    setup_logging(settings)

    print(f"\n⚠️  WARNING: This will delete ALL data in {settings.database_url}!")
    response = input("Are you sure? (yes/no): ")

    if response.lower() != "yes":
        print("Cancelled.")
        return

    print("\nResetting state...")

    database = Database.from_settings(settings)
    try:
        database.drop_tables()
        database.create_tables()
    finally:
        database.disconnect()

    print("✓ All tables dropped and recreated\n")


if __name__ == "__main__":
    reset_all_state()
