"""
Module: fleet_kernel.db.constraints
Responsibility: Loading, installing, and verifying the PostgreSQL exclusion
    constraints that back the interval non-overlap invariants at the
    storage level.
Architecture position: Kernel > DB.  May import from db/ only.  MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced (via 2 EXCLUDE USING gist constraints):
    ASSIGNMENT_NON_OVERLAP    -- attribute_assignments, keyed by
                                 (subject_kind, subject_id, attribute_type_id)
    COST_SCHEDULE_NON_OVERLAP -- cost_schedule_entries, keyed by
                                 attribute_type_id

Failure modes:
    - IntegrityError (exclusion_violation) on INSERT/UPDATE of an
      overlapping row.  Services translate it to the matching OverlapError
      via ``violated_constraint()``.
    - FileNotFoundError if SQL files are missing from the sql/ directory.
    - Requires the btree_gist extension (created by the install script).

The service-level overlap check under a row lock remains the primary guard;
these constraints catch writers that bypass the services.
"""

from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

SQL_DIR = Path(__file__).parent / "sql"

CONSTRAINT_FILES = [
    "01_attribute_assignment_exclusion.sql",
    "02_cost_schedule_exclusion.sql",
]

DROP_FILE = "99_drop_all.sql"

ASSIGNMENT_EXCLUSION = "ex_attribute_assignments_no_overlap"
COST_SCHEDULE_EXCLUSION = "ex_cost_schedule_entries_no_overlap"

ALL_CONSTRAINT_NAMES = [
    ASSIGNMENT_EXCLUSION,
    COST_SCHEDULE_EXCLUSION,
]


def _load_sql_file(filename: str) -> str:
    return (SQL_DIR / filename).read_text(encoding="utf-8")


def _load_all_constraint_sql() -> str:
    sql_parts = []
    for filename in CONSTRAINT_FILES:
        sql_parts.append(f"-- Loading: {filename}")
        sql_parts.append(_load_sql_file(filename))
        sql_parts.append("")
    return "\n".join(sql_parts)


def install_exclusion_constraints(engine: Engine) -> None:
    """
    Install the interval exclusion constraints.

    Preconditions: Tables must exist (call after create_all()).  Engine must
        be connected to PostgreSQL.
    Postconditions: Every name in ALL_CONSTRAINT_NAMES is installed.
        Re-running drops and re-adds them (idempotent).
    """
    with engine.connect() as conn:
        conn.execute(text(_load_all_constraint_sql()))
        conn.commit()


def uninstall_exclusion_constraints(engine: Engine) -> None:
    """Remove the interval exclusion constraints."""
    with engine.connect() as conn:
        conn.execute(text(_load_sql_file(DROP_FILE)))
        conn.commit()


def get_installed_constraints(engine: Engine) -> list[str]:
    """List the exclusion constraints currently present in pg_constraint."""
    with engine.connect() as conn:
        result = conn.execute(
            text(
                "SELECT conname FROM pg_constraint "
                "WHERE contype = 'x' AND conname = ANY(:names) "
                "ORDER BY conname"
            ),
            {"names": ALL_CONSTRAINT_NAMES},
        )
        return [row[0] for row in result]


def constraints_installed(engine: Engine) -> bool:
    """True iff every exclusion constraint is installed."""
    return len(get_installed_constraints(engine)) == len(ALL_CONSTRAINT_NAMES)


def violated_constraint(exc: IntegrityError) -> str | None:
    """
    Name of the constraint behind an IntegrityError, when the driver says.

    psycopg2 exposes it as ``orig.diag.constraint_name``; other drivers
    return None.
    """
    diag = getattr(exc.orig, "diag", None)
    return getattr(diag, "constraint_name", None)
