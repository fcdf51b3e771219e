"""001 – Initial schema: users, expenses, expense_actions.

Enumerated columns are VARCHAR guarded by CHECK constraints: values are
stored by name, so reordering an enum in code never changes stored data.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00
"""

import re

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_SAFE_IDENT_RE = re.compile(r'^[a-z_][a-z0-9_]*$')

USER_ROLES = ["EMPLOYEE", "MANAGER", "FINANCE"]
EXPENSE_STATUSES = ["SUBMITTED", "APPROVED", "REJECTED", "REIMBURSED"]
EXPENSE_CATEGORIES = ["TRAVEL", "MEALS", "LODGING", "SUPPLIES", "OTHER"]
ACTION_TYPES = ["SUBMIT", "APPROVE", "REJECT", "REIMBURSE"]


def _in_list(column: str, values: list[str]) -> str:
    vals = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({vals})"


def _safe_drop_table(name: str) -> None:
    if not _SAFE_IDENT_RE.match(name):
        raise ValueError(f"Unsafe SQL identifier: {name!r}")
    op.execute(sa.text(f'DROP TABLE IF EXISTS "{name}" CASCADE'))


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── 1. users ──────────────────────────────────────────────────────────
    op.execute(f"""
        CREATE TABLE users (
            id              SERIAL PRIMARY KEY,
            name            VARCHAR(200) NOT NULL,
            email           VARCHAR(320) NOT NULL UNIQUE,
            password_hash   VARCHAR(255) NOT NULL,
            role            VARCHAR(20)  NOT NULL
                            CHECK ({_in_list("role", USER_ROLES)}),
            created_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW()
        )
    """)

    # ── 2. expenses ───────────────────────────────────────────────────────
    op.execute(f"""
        CREATE TABLE expenses (
            id              SERIAL PRIMARY KEY,
            user_id         INTEGER       NOT NULL REFERENCES users(id),
            amount          NUMERIC(12,2) NOT NULL CHECK (amount > 0),
            currency        VARCHAR(3)    NOT NULL DEFAULT 'USD',
            category        VARCHAR(20)   NOT NULL
                            CHECK ({_in_list("category", EXPENSE_CATEGORIES)}),
            description     VARCHAR(500)  NOT NULL,
            expense_date    DATE          NOT NULL,
            status          VARCHAR(20)   NOT NULL DEFAULT 'SUBMITTED'
                            CHECK ({_in_list("status", EXPENSE_STATUSES)}),
            created_at      TIMESTAMPTZ   NOT NULL,
            updated_at      TIMESTAMPTZ   NOT NULL,
            version         INTEGER       NOT NULL DEFAULT 1
        )
    """)
    op.execute("CREATE INDEX ix_expenses_user_id ON expenses(user_id)")
    op.execute("CREATE INDEX ix_expenses_status ON expenses(status)")

    # ── 3. expense_actions (append-only) ──────────────────────────────────
    op.execute(f"""
        CREATE TABLE expense_actions (
            id              SERIAL PRIMARY KEY,
            expense_id      INTEGER      NOT NULL REFERENCES expenses(id) ON DELETE CASCADE,
            actor_id        INTEGER      NOT NULL REFERENCES users(id),
            action_type     VARCHAR(20)  NOT NULL
                            CHECK ({_in_list("action_type", ACTION_TYPES)}),
            comment         VARCHAR(500),
            sequence        INTEGER      NOT NULL CHECK (sequence > 0),
            timestamp       TIMESTAMPTZ  NOT NULL,
            CONSTRAINT uq_expense_actions_expense_sequence UNIQUE (expense_id, sequence)
        )
    """)
    op.execute(
        "CREATE INDEX ix_expense_actions_expense_timestamp "
        "ON expense_actions(expense_id, timestamp)"
    )
    op.execute("CREATE INDEX ix_expense_actions_actor_id ON expense_actions(actor_id)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    _safe_drop_table("expense_actions")
    _safe_drop_table("expenses")
    _safe_drop_table("users")
