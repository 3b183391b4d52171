from __future__ import annotations

import logging

from sqlalchemy import text

from seatbook.core.logging import setup_logging
from seatbook.db.base import Base
from seatbook.db.session import engine

# Import models to register with SQLAlchemy
import seatbook.models  # noqa: F401

logger = logging.getLogger(__name__)

# One writer wins per (resource, overlapping window); cancelled rows never conflict.
EXCLUSION_CONSTRAINTS = {
    "reservations_seat_no_overlap": """
        ALTER TABLE reservations
        ADD CONSTRAINT reservations_seat_no_overlap
        EXCLUDE USING gist (
            seat_id WITH =,
            tstzrange(start_at, end_at, '[)') WITH &&
        )
        WHERE (status <> 'cancelled' AND seat_id IS NOT NULL)
    """,
    "reservations_table_no_overlap": """
        ALTER TABLE reservations
        ADD CONSTRAINT reservations_table_no_overlap
        EXCLUDE USING gist (
            table_id WITH =,
            tstzrange(start_at, end_at, '[)') WITH &&
        )
        WHERE (status <> 'cancelled' AND seat_id IS NULL)
    """,
}


def main() -> int:
    setup_logging()

    # Extensions needed for exclusion constraints (overlap prevention)
    with engine.begin() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS btree_gist"))

    Base.metadata.create_all(bind=engine)

    with engine.begin() as conn:
        existing = {
            row[0]
            for row in conn.execute(
                text("SELECT conname FROM pg_constraint WHERE conrelid = 'reservations'::regclass")
            )
        }
        for name, ddl in EXCLUSION_CONSTRAINTS.items():
            if name in existing:
                logger.info("Constraint %s already present", name)
                continue
            conn.execute(text(ddl))
            logger.info("Added constraint %s", name)

    logger.info("DB initialized")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
