# -*- coding: utf-8 -*-
"""Initial schema of the affiliate portal.

Tables, unique keys, CHECK constraints and indexes come from the ORM models,
so the first revision cannot drift from them. checkfirst=True makes a repeat
run a no-op.
"""

from __future__ import annotations

from alembic import op

from affiliate_portal.core.database_core import Base
from affiliate_portal.core.logging_core import get_logger
from affiliate_portal.models import REQUIRED_TABLES

revision: str = "0001"
down_revision: str | None = None
branch_labels = None
depends_on = None

logger = get_logger(__name__)


def upgrade() -> None:
    bind = op.get_bind()
    logger.info("Creating tables", extra={"tables": list(REQUIRED_TABLES)})
    Base.metadata.create_all(bind=bind, checkfirst=True)


def downgrade() -> None:
    bind = op.get_bind()
    logger.info("Dropping tables", extra={"tables": list(REQUIRED_TABLES)})
    Base.metadata.drop_all(bind=bind, checkfirst=True)
