#!/usr/bin/env python3
"""
Storefront Backend Runner
=========================

Script to run the storefront backend in different modes.

Usage:
    python run_app.py                    # Development server with auto-reload (default)
    python run_app.py --mode prod        # Production mode
    python run_app.py --init-db          # Create tables, then exit
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
"""

import argparse
import asyncio
import os
import sys

def print_banner():
    """Print application banner"""
    banner = """
╔═══════════════════════════════════════════════════════╗
║                  Storefront Backend                   ║
╚═══════════════════════════════════════════════════════╝
    """
    print(banner)

def check_environment():
    """Report on .env and database before starting"""
    print("\n🔍 Checking environment...")

    if os.path.exists(".env"):
        print("✅ .env file found")
    else:
        print("⚠️  .env file not found, using defaults")

    from app.core.config import settings
    print(f"🗄️  Database: {settings.DATABASE_URL}")
    return True

def init_database():
    """Create all tables"""
    from app.core.database import init_db, close_db

    async def _run():
        try:
            await init_db()
        finally:
            await close_db()

    asyncio.run(_run())
    print("✅ Database tables created")

def run_app(host="0.0.0.0", port=8000, reload=True, workers=1):
    """Run the FastAPI application"""
    print(f"\n🚀 Starting application on {host}:{port}")
    print(f"📖 API Docs: http://{host}:{port}/api/docs")
    print("\n" + "=" * 50)

    import uvicorn
    try:
        uvicorn.run(
            "app.main:app",
            host=host,
            port=port,
            reload=reload,
            workers=1 if reload else workers,
            log_level="info"
        )
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")

def main():
    from app.core.config import settings

    parser = argparse.ArgumentParser(
        description="Storefront Backend Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        choices=["dev", "prod"],
        default="dev",
        help="Server mode (default: dev)"
    )
    parser.add_argument(
        "--host",
        default=settings.HOST,
        help=f"Host to bind to (default: {settings.HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Port to bind to (default: {settings.PORT})"
    )
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload"
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create database tables and exit"
    )

    args = parser.parse_args()

    print_banner()

    if not check_environment():
        return 1

    if args.init_db:
        init_database()
        return 0

    reload = not args.no_reload and args.mode != "prod"
    run_app(args.host, args.port, reload, settings.WORKERS)

    return 0

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(0)
