#!/usr/bin/env python3
"""
ParcelTrack -- Shipment tracking API with customer accounts.

Usage:
  python main.py serve
  python main.py serve --host 127.0.0.1 --port 8000 --reload
  python main.py hash-password 's3cret'

Environment variables (or .env):
  SECRET_KEY      Token signing key, at least 32 characters. Required unless DEBUG=true.
  DATABASE_URL    SQLAlchemy URL. Defaults to an in-memory SQLite database.
  SEED_DEMO_DATA  Load the built-in demo accounts and shipments on startup.
  SEED_FILE       Load accounts and shipments from a JSON file instead.
"""

import argparse
import getpass

from core.config import get_settings


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )


def _hash_password(args: argparse.Namespace) -> None:
    from auth.tokens import hash_password
    from core.errors import ValidationError

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("  [!] Password must not be empty.")
        return
    try:
        print(hash_password(password))
    except ValidationError as e:
        print(f"  [!] {e.message}.")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="parceltrack",
        description="Shipment tracking API with customer accounts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve
  SEED_DEMO_DATA=true DEBUG=true python main.py serve --reload
  python main.py hash-password
        """,
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Reload on source changes (development only)")
    serve.set_defaults(func=_serve)

    hasher = sub.add_parser("hash-password", help="Print a bcrypt hash for a seed file")
    hasher.add_argument("password", nargs="?", default=None, help="Plaintext password (prompted if omitted)")
    hasher.set_defaults(func=_hash_password)

    args = parser.parse_args()
    if not getattr(args, "func", None):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
