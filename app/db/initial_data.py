# auth_code_api/app/db/initial_data.py
import argparse
import asyncio
import sys

from loguru import logger

from app.db.base import Base
from app.db.session import create_engine, dispose_engine
from app.core.logging import setup_logging
from app.models import auth_code  # noqa F401


async def init_db(drop: bool = False) -> None:
    engine = create_engine()
    try:
        async with engine.begin() as conn:
            if drop:
                logger.info("Dropping existing tables (if any)...")
                await conn.run_sync(Base.metadata.drop_all)
                logger.info("Tables dropped.")

            logger.info("Creating tables defined in the models...")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created.")
    finally:
        await dispose_engine(engine)

    logger.info("Database initialisation finished.")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the auth_codes table.")
    parser.add_argument(
        "--drop", action="store_true",
        help="drop every table first (DESTROYS all stored codes)",
    )
    args = parser.parse_args(argv)

    setup_logging()
    try:
        asyncio.run(init_db(drop=args.drop))
    except Exception:
        logger.exception("Database initialisation failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
