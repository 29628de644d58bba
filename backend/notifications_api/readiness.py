"""Readiness checks: config, packages, database."""
import argparse
import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, Optional

from sqlalchemy import text

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from notifications_api.settings import Settings

logger = logging.getLogger(__name__)

# Result: (passed: bool, message: str)
CheckResult = tuple[bool, str]
ChecksDict = dict[str, CheckResult]

REQUIRED_CHECKS = {"config", "packages", "database"}


def check_config(settings: Optional["Settings"] = None) -> CheckResult:
    """Load settings (unless given) and read the values the server cannot start without."""
    try:
        from notifications_api.settings import get_settings
        s = settings or get_settings()
        _ = s.database_url
        _ = s.host
        _ = s.port
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_packages() -> CheckResult:
    """Import critical modules: uvicorn, sqlalchemy, asyncpg, notifications_api.main."""
    missing = []
    try:
        import uvicorn  # noqa: F401
    except ImportError:
        missing.append("uvicorn")
    try:
        import sqlalchemy  # noqa: F401
    except ImportError:
        missing.append("sqlalchemy")
    try:
        import asyncpg  # noqa: F401
    except ImportError:
        missing.append("asyncpg")
    try:
        import notifications_api.main  # noqa: F401
    except ImportError as e:
        missing.append(f"notifications_api.main ({e})")
    if missing:
        return False, f"missing: {', '.join(missing)}"
    return True, "ok"


async def _check_database_async(
    session_factory: Optional["async_sessionmaker[AsyncSession]"] = None,
) -> CheckResult:
    """Run a trivial query through the given session factory, or a throwaway engine from settings."""
    try:
        if session_factory is not None:
            async with session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True, "ok"

        from notifications_api.infra.db.base import create_engine_from_settings
        from notifications_api.settings import get_settings
        engine = create_engine_from_settings(get_settings())
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        finally:
            await engine.dispose()
        return True, "ok"
    except Exception as e:
        logger.warning("Database readiness check failed: %s", e)
        return False, str(e)


def check_database() -> CheckResult:
    """Check database connectivity using settings.database_url."""
    return asyncio.run(_check_database_async())


def run_all_checks() -> ChecksDict:
    """Run all readiness checks (sync). Returns dict of check_name -> (passed, message)."""
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": check_database(),
    }


async def run_all_checks_async(
    settings: Optional["Settings"] = None,
    session_factory: Optional["async_sessionmaker[AsyncSession]"] = None,
) -> ChecksDict:
    """Run all readiness checks (async). GET /ready passes the app's own settings and pool."""
    return {
        "config": check_config(settings),
        "packages": check_packages(),
        "database": await _check_database_async(session_factory),
    }


def is_ready(checks: Optional[ChecksDict] = None) -> tuple[bool, dict[str, str]]:
    """
    True if all required checks pass.
    Returns (ready: bool, checks_summary: dict of name -> "ok" | error message).
    """
    if checks is None:
        checks = run_all_checks()
    summary = {name: msg for name, (_, msg) in checks.items()}
    all_required = all(checks[n][0] for n in REQUIRED_CHECKS if n in checks)
    return all_required, summary


def main(argv: Optional[list[str]] = None) -> int:
    """Console entry point: print one line per check, exit 1 when a required check fails."""
    parser = argparse.ArgumentParser(description="Check that the notifications API can serve traffic.")
    parser.add_argument("--json", action="store_true", help="print the summary as JSON")
    args = parser.parse_args(argv)

    checks = run_all_checks()
    ready, summary = is_ready(checks)
    if args.json:
        print(json.dumps({"ready": ready, "checks": summary}))
    else:
        for name, msg in summary.items():
            status = "OK" if checks[name][0] else "FAIL"
            print(f"  {name}: {status}  {msg}")
        print("Readiness: " + ("READY" if ready else "NOT READY"))
    return 0 if ready else 1


if __name__ == "__main__":
    sys.exit(main())
