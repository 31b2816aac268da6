# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Alembic environment for the tracker schema (users, components).

Online migrations run on the application's own engine, so they see the same
DATABASE_URL and, on SQLite, the same foreign-key pragma as the API.
"""

import sys
import os

# backend/ for ``core`` / ``models``, the project root for etc/app.conf
_BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_PROJECT_ROOT = os.path.dirname(_BACKEND_DIR)
for _path in (_BACKEND_DIR, _PROJECT_ROOT):
    if _path not in sys.path:
        sys.path.insert(0, _path)

from alembic import context

from core.config import settings
from database import Base, engine

# Registers the tables on Base.metadata for --autogenerate
import models.user       # noqa: F401, E402
import models.component  # noqa: F401, E402

# SQLite cannot ALTER constraints in place; batch mode rebuilds the table
# (0003 adds the owner foreign key this way).
_render_as_batch = engine.dialect.name == "sqlite"


def run_migrations_online():
    with engine.connect() as conn:
        context.configure(
            connection=conn,
            target_metadata=Base.metadata,
            render_as_batch=_render_as_batch,
        )
        with context.begin_transaction():
            context.run_migrations()


def run_migrations_offline():
    context.configure(
        url=settings.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
        render_as_batch=_render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
