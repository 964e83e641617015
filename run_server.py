#!/usr/bin/env python3
"""
Startup script for the phone order service.

Usage:
    # Run on the default port
    python run_server.py

    # Use a specific database and port
    python run_server.py --database-url sqlite:///./data/shop.db --port 8001

    # Seed demo products first, with reload for development
    python run_server.py --seed --reload
"""

import argparse
import os


def main():
    parser = argparse.ArgumentParser(description="Run the phone order service")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=8000,
        help="Port to run on (default: 8000)",
    )
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy database URL (overrides DATABASE_URL)",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Seed demo products before starting",
    )
    parser.add_argument(
        "--reload",
        "-r",
        action="store_true",
        help="Enable auto-reload for development",
    )

    args = parser.parse_args()

    # Must be set before phone_order.config is imported
    if args.database_url:
        os.environ["DATABASE_URL"] = args.database_url

    database_url = os.environ.get("DATABASE_URL", "sqlite:///./phone_order.db")
    if database_url.startswith("sqlite:///./"):
        db_dir = os.path.dirname(database_url.replace("sqlite:///./", ""))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    if args.seed:
        from phone_order.seed_catalog import seed_catalog
        seed_catalog()

    print(f"\n{'=' * 50}")
    print("Starting: Phone Order API")
    print(f"Port:     {args.port}")
    print(f"Database: {database_url}")
    print(f"{'=' * 50}\n")

    import uvicorn

    uvicorn.run(
        "phone_order.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
