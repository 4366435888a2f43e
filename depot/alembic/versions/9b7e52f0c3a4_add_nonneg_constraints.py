"""add non-negative check constraints (stock, lines, size, capacity)

Revision ID: 9b7e52f0c3a4
Revises: 4a1c0e2b7d10
Create Date: 2026-10-14
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "9b7e52f0c3a4"
down_revision: Union[str, Sequence[str], None] = "4a1c0e2b7d10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# (table, constraint, check)
CHECKS = [
    ("stock_entries", "ck_stock_quantity_nonneg", "quantity >= 0"),
    ("inbound_lines", "ck_inbound_line_qty_nonneg", "quantity >= 0"),
    ("outbound_lines", "ck_outbound_line_qty_nonneg", "quantity >= 0"),
    ("products", "ck_product_size_nonneg", "size IS NULL OR size >= 0"),
    ("warehouses", "ck_warehouse_capacity_nonneg", "capacity IS NULL OR capacity >= 0"),
]


def _add_check_if_missing(table_name: str, constraint_name: str, check_sql: str) -> None:
    # Idempotent Postgres
    op.execute(
        f"""
        DO $$
        BEGIN
            IF NOT EXISTS (
                SELECT 1
                FROM pg_constraint c
                JOIN pg_class t ON t.oid = c.conrelid
                WHERE t.relname = '{table_name}'
                  AND c.conname = '{constraint_name}'
            ) THEN
                ALTER TABLE {table_name}
                ADD CONSTRAINT {constraint_name}
                CHECK ({check_sql});
            END IF;
        END $$;
        """
    )


def upgrade() -> None:
    # Pas de clamp des données existantes : une ligne négative doit faire
    # échouer la migration (elle signale une dérive du stock).
    for table_name, constraint_name, check_sql in CHECKS:
        _add_check_if_missing(table_name, constraint_name, check_sql)


def downgrade() -> None:
    for table_name, constraint_name, _ in reversed(CHECKS):
        op.execute(f"ALTER TABLE {table_name} DROP CONSTRAINT IF EXISTS {constraint_name};")
