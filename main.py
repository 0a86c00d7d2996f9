"""
Inventory core command-line entry point.

Usage:
    python main.py init-db                         Create tables
    python main.py check                           Validate config, test database
    python main.py price <unit_id> [--options JSON]
    python main.py lock <unit_id> <user_id> [--minutes N]
    python main.py release <unit_id>
    python main.py status <unit_id> <target> [--user-id U] [--booking-id B] [--minutes N]
    python main.py reclaim-once                    Release expired locks once
    python main.py run-reclaimer                   Start the lock reclaimer
"""
import argparse
import asyncio
import json
import logging
import sys

from config import config
from database import check_connection, get_session_context, init_db
from errors import InventoryError
from schemas.inventory import UnitResponse
from services import LockReclaimer, UnitService, reclaim_expired_locks

logger = logging.getLogger(__name__)


def _print_json(data):
    print(json.dumps(data, indent=2, default=str))


def _unit_json(unit):
    return UnitResponse.model_validate(unit).model_dump(mode="json")


def cmd_init_db(args):
    """Create all tables (use alembic for managed deployments)."""
    init_db()
    print(f"Tables created on {config.DATABASE_URL}")
    return 0


def cmd_check(args):
    """Validate configuration and test the database connection."""
    errors = config.validate()
    if errors:
        print("[CONFIG ERRORS]")
        for err in errors:
            print(f"  - {err}")
        return 1

    if not check_connection():
        print(f"Database connection failed: {config.DATABASE_URL}")
        return 1

    print(f"Configuration OK, database reachable: {config.DATABASE_URL}")
    return 0


def cmd_price(args):
    """Print the price breakdown for a unit."""
    try:
        options = json.loads(args.options) if args.options else None
    except json.JSONDecodeError as e:
        print(f"Error: --options is not valid JSON: {e}", file=sys.stderr)
        return 1

    with get_session_context() as db:
        breakdown = UnitService.compute_price(db, args.unit_id, options)
        _print_json(breakdown.model_dump(mode="json"))
    return 0


def cmd_lock(args):
    with get_session_context() as db:
        unit = UnitService.lock_unit(db, args.unit_id, args.user_id, args.minutes)
        _print_json(_unit_json(unit))
    return 0


def cmd_release(args):
    with get_session_context() as db:
        unit = UnitService.release_unit(db, args.unit_id)
        _print_json(_unit_json(unit))
    return 0


def cmd_status(args):
    """Move a unit to a target status."""
    data = {
        "user_id": args.user_id,
        "booking_id": args.booking_id,
        "minutes": args.minutes,
    }
    with get_session_context() as db:
        unit = UnitService.change_unit_status(db, args.unit_id, args.target, data)
        _print_json(_unit_json(unit))
    return 0


def cmd_reclaim_once(args):
    """Run one lock reclaim sweep."""
    with get_session_context() as db:
        result = reclaim_expired_locks(db)
    _print_json(result.model_dump(mode="json"))
    return 0


def cmd_run_reclaimer(args):
    """Start the lock reclaimer (runs until SIGTERM/SIGINT)."""
    reclaimer = LockReclaimer(interval=args.interval)
    asyncio.run(reclaimer.run())
    _print_json(reclaimer.get_status())
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description='Inventory pricing and reservation core')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables')
    subparsers.add_parser('check', help='Validate configuration and database connection')

    price = subparsers.add_parser('price', help='Calculate a unit price')
    price.add_argument('unit_id', type=int)
    price.add_argument('--options', help='Call-site pricing rules as a JSON object')

    lock = subparsers.add_parser('lock', help='Lock a unit for a user')
    lock.add_argument('unit_id', type=int)
    lock.add_argument('user_id')
    lock.add_argument('--minutes', type=int, help='Lock duration (defaults to the tenant setting)')

    release = subparsers.add_parser('release', help='Release a locked unit')
    release.add_argument('unit_id', type=int)

    status = subparsers.add_parser('status', help='Change unit status')
    status.add_argument('unit_id', type=int)
    status.add_argument('target', help='available, locked, booked or sold')
    status.add_argument('--user-id')
    status.add_argument('--booking-id')
    status.add_argument('--minutes', type=int)

    subparsers.add_parser('reclaim-once', help='Release expired locks once')

    reclaimer = subparsers.add_parser('run-reclaimer', help='Start the lock reclaimer')
    reclaimer.add_argument('--interval', type=float, default=None,
                           help=f'Seconds between sweeps (default {config.LOCK_RECLAIM_INTERVAL})')

    return parser


def main(argv=None):
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    args = build_parser().parse_args(argv)

    commands = {
        'init-db': cmd_init_db,
        'check': cmd_check,
        'price': cmd_price,
        'lock': cmd_lock,
        'release': cmd_release,
        'status': cmd_status,
        'reclaim-once': cmd_reclaim_once,
        'run-reclaimer': cmd_run_reclaimer,
    }

    try:
        return commands[args.command](args)
    except InventoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
