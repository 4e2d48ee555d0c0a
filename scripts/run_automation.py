"""Run one automation action and print its result as JSON.

Examples:
    python scripts/run_automation.py check_low_stock
    python scripts/run_automation.py get_expiring_items --params '{"days": 14}'
    python scripts/run_automation.py dismiss_notification --params '{"alert_id": 3}'
"""

import argparse
import json
import sys

from cafe_backoffice.config import get_settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.services.automation import AutomationService
from cafe_backoffice.utils.logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a café back-office automation action")
    parser.add_argument("action", help="Action name, e.g. check_low_stock or run_checks")
    parser.add_argument(
        "--params",
        default="{}",
        help="JSON object of keyword arguments for the action",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Dispatch the action; exit status is 0 on success."""
    args = parse_args(argv)

    try:
        params = json.loads(args.params)
    except json.JSONDecodeError as e:
        print(json.dumps({"success": False, "error": f"Invalid --params JSON: {e}"}))
        return 2
    if not isinstance(params, dict):
        print(json.dumps({"success": False, "error": "--params must be a JSON object"}))
        return 2

    settings = get_settings()
    setup_logging(settings)

    database = Database.from_settings(settings)
    database.create_tables()
    try:
        service = AutomationService(database, settings)
        result = service.execute(args.action, params)
    finally:
        database.disconnect()

    print(result.model_dump_json(indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
