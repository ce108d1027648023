"""Main entry point for Job-Trail."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from jobtrail import __version__
from jobtrail.activity.repository import ActivityLogRepository
from jobtrail.activity.service import ActivityLogger
from jobtrail.analytics.service import AnalyticsService
from jobtrail.config.settings import Settings
from jobtrail.errors import DuplicateApplicationError, JobTrailError, NotFoundError
from jobtrail.storage import Database
from jobtrail.tracker.models import ApplicationStatus, MetAt
from jobtrail.tracker.repository import ApplicationRepository, ContactRepository
from jobtrail.tracker.service import TrackerService
from jobtrail.utils.logging import configure_logging


def _print_json(payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return str(value)

    print(json.dumps(payload, indent=2, default=_default))


def _add_application_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--company", required=required, help="Company name")
    parser.add_argument("--role", required=required, help="Role title")
    parser.add_argument(
        "--date-applied",
        dest="date_applied",
        required=required,
        help="Date applied (ISO-8601, e.g. 2025-03-01)",
    )
    parser.add_argument(
        "--status",
        choices=[status.value for status in ApplicationStatus],
        default=None,
        help="Application status",
    )
    parser.add_argument("--source", default=None, help="Where the job was found")
    parser.add_argument("--notes", default=None, help="Free-form notes")
    parser.add_argument("--salary-min", dest="salary_min", type=float, default=None)
    parser.add_argument("--salary-max", dest="salary_max", type=float, default=None)


def _add_contact_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required, help="Contact name")
    parser.add_argument("--email", default=None)
    parser.add_argument("--company", default=None)
    parser.add_argument("--role", default=None)
    parser.add_argument(
        "--met-at",
        dest="met_at",
        choices=[value.value for value in MetAt],
        default=None,
        help="Where the contact was met",
    )
    parser.add_argument("--met-date", dest="met_date", default=None)
    parser.add_argument("--follow-up-date", dest="follow_up_date", default=None)
    parser.add_argument(
        "--last-contacted-date", dest="last_contacted_date", default=None
    )
    parser.add_argument("--notes", default=None)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="jobtrail",
        description="Job-Trail: track job applications, contacts and activity",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m jobtrail app add --company Acme --role Engineer --date-applied 2025-03-01
  python -m jobtrail stats
  python -m jobtrail logs --entity-type application
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Override database path (defaults to settings)",
    )
    parser.add_argument(
        "--user",
        default=None,
        help="User id to act as (defaults to settings)",
    )

    subparsers = parser.add_subparsers(dest="command", title="commands")

    # Applications
    app_parser = subparsers.add_parser("app", help="Manage applications")
    app_sub = app_parser.add_subparsers(dest="app_cmd", required=True)

    app_add = app_sub.add_parser("add", help="Record a new application")
    _add_application_fields(app_add, required=True)

    app_update = app_sub.add_parser("update", help="Update an application")
    app_update.add_argument("id", help="Application id")
    _add_application_fields(app_update, required=False)

    app_delete = app_sub.add_parser("delete", help="Delete an application")
    app_delete.add_argument("id", help="Application id")

    app_list = app_sub.add_parser("list", help="List applications")
    app_list.add_argument("--status", default=None)
    app_list.add_argument("--company", default=None)
    app_list.add_argument("--source", default=None)
    app_list.add_argument("--from", dest="from_date", default=None)
    app_list.add_argument("--to", dest="to_date", default=None)

    # Contacts
    contact_parser = subparsers.add_parser("contact", help="Manage network contacts")
    contact_sub = contact_parser.add_subparsers(dest="contact_cmd", required=True)

    contact_add = contact_sub.add_parser("add", help="Add a contact")
    _add_contact_fields(contact_add, required=True)
    contact_add.add_argument(
        "--from-application",
        dest="from_application",
        action="store_true",
        help="Mark the contact as added from an application",
    )

    contact_update = contact_sub.add_parser("update", help="Update a contact")
    contact_update.add_argument("id", help="Contact id")
    _add_contact_fields(contact_update, required=False)

    contact_delete = contact_sub.add_parser("delete", help="Delete a contact")
    contact_delete.add_argument("id", help="Contact id")

    contact_list = contact_sub.add_parser("list", help="List contacts")
    contact_list.add_argument("--company", default=None)
    contact_list.add_argument("--name", default=None)
    contact_list.add_argument("--met-at", dest="met_at", default=None)

    # Analytics
    subparsers.add_parser("stats", help="Show application statistics")
    subparsers.add_parser("network-stats", help="Show contact statistics")
    subparsers.add_parser("streak", help="Show application streaks")

    # Activity log
    logs_parser = subparsers.add_parser("logs", help="Show activity log entries")
    logs_parser.add_argument(
        "--entity-type",
        dest="entity_type",
        choices=["application", "network"],
        default=None,
    )
    logs_parser.add_argument("--entity-id", dest="entity_id", default=None)
    logs_parser.add_argument("--limit", type=int, default=None)

    note_parser = subparsers.add_parser("note", help="Set the note on a log entry")
    note_parser.add_argument("entry_id", help="Activity log entry id")
    note_parser.add_argument("text", help="Note text")

    return parser


def _application_payload(parsed: argparse.Namespace) -> dict:
    payload = {
        key: getattr(parsed, key)
        for key in ("company", "role", "date_applied", "status", "source", "notes")
        if getattr(parsed, key, None) is not None
    }
    if parsed.salary_min is not None or parsed.salary_max is not None:
        payload["salary_range"] = {"min": parsed.salary_min, "max": parsed.salary_max}
    return payload


def _contact_payload(parsed: argparse.Namespace) -> dict:
    keys = (
        "name",
        "email",
        "company",
        "role",
        "met_at",
        "met_date",
        "follow_up_date",
        "last_contacted_date",
        "notes",
    )
    return {key: getattr(parsed, key) for key in keys if getattr(parsed, key, None) is not None}


async def _dispatch(
    parsed: argparse.Namespace,
    user_id: str,
    tracker: TrackerService,
    analytics: AnalyticsService,
    activity: ActivityLogger,
) -> int:
    if parsed.command == "app":
        if parsed.app_cmd == "add":
            _print_json(await tracker.create_application(user_id, _application_payload(parsed)))
            return 0
        if parsed.app_cmd == "update":
            application = await tracker.update_application(
                user_id, parsed.id, _application_payload(parsed)
            )
            if application is None:
                raise NotFoundError(f"Application {parsed.id} not found")
            _print_json(application)
            return 0
        if parsed.app_cmd == "delete":
            if not await tracker.delete_application(user_id, parsed.id):
                raise NotFoundError(f"Application {parsed.id} not found")
            print("ok")
            return 0
        if parsed.app_cmd == "list":
            _print_json(
                await tracker.list_applications(
                    user_id,
                    status=parsed.status,
                    company=parsed.company,
                    source=parsed.source,
                    from_date=parsed.from_date,
                    to_date=parsed.to_date,
                )
            )
            return 0

    if parsed.command == "contact":
        if parsed.contact_cmd == "add":
            _print_json(
                await tracker.create_contact(
                    user_id,
                    _contact_payload(parsed),
                    from_application=parsed.from_application,
                )
            )
            return 0
        if parsed.contact_cmd == "update":
            contact = await tracker.update_contact(
                user_id, parsed.id, _contact_payload(parsed)
            )
            if contact is None:
                raise NotFoundError(f"Contact {parsed.id} not found")
            _print_json(contact)
            return 0
        if parsed.contact_cmd == "delete":
            if not await tracker.delete_contact(user_id, parsed.id):
                raise NotFoundError(f"Contact {parsed.id} not found")
            print("ok")
            return 0
        if parsed.contact_cmd == "list":
            _print_json(
                await tracker.list_contacts(
                    user_id,
                    company=parsed.company,
                    name=parsed.name,
                    met_at=parsed.met_at,
                )
            )
            return 0

    if parsed.command == "stats":
        _print_json(await analytics.get_stats(user_id))
        return 0

    if parsed.command == "network-stats":
        _print_json(await analytics.get_network_stats(user_id))
        return 0

    if parsed.command == "streak":
        _print_json(await analytics.get_streak(user_id))
        return 0

    if parsed.command == "logs":
        _print_json(
            await activity.list_logs(
                user_id,
                entity_type=parsed.entity_type,
                entity_id=parsed.entity_id,
                limit=parsed.limit,
            )
        )
        return 0

    if parsed.command == "note":
        entry = await activity.update_log_note(parsed.entry_id, user_id, parsed.text)
        if entry is None:
            raise NotFoundError(f"Activity log {parsed.entry_id} not found")
        _print_json(entry)
        return 0

    print("Unknown command", file=sys.stderr)
    return 1


async def run(parsed: argparse.Namespace, settings: Settings) -> int:
    """Open the database, wire the services and run one command."""
    database = Database(parsed.db or settings.db_path)
    await database.initialize()
    try:
        activity = ActivityLogger(
            ActivityLogRepository(database),
            default_limit=settings.activity_log_limit,
        )
        applications = ApplicationRepository(database)
        contacts = ContactRepository(database)
        tracker = TrackerService(applications, contacts, activity)
        analytics = AnalyticsService(
            applications,
            contacts,
            count_applied_as_response=settings.count_applied_as_response,
        )
        user_id = parsed.user or settings.default_user
        return await _dispatch(parsed, user_id, tracker, analytics, activity)
    finally:
        await database.close()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.command is None:
        parser.print_help()
        return 0

    logger.debug(f"Job-Trail v{__version__} running '{parsed.command}'")

    try:
        return asyncio.run(run(parsed, settings))
    except DuplicateApplicationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except JobTrailError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
