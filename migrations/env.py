"""
Alembic env для базы расписания.

Приложение собирается через create_app с конфигом из FLASK_CONFIG (по умолчанию dev),
URL берётся из DATABASE_URL приложения, если в alembic.ini он не задан.
"""
import logging
import os
import sys
from logging.config import fileConfig

from alembic import context

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app import create_app            # noqa: E402
from extensions import db             # noqa: E402
import models                         # noqa: E402,F401  users, schedule, day_comments, proposals*

config = context.config
if config.config_file_name is not None:
    # JSON-логгеры приложения (blueprints.*) не отключаем
    fileConfig(config.config_file_name, disable_existing_loggers=False)
log = logging.getLogger("alembic.env")

flask_app = create_app(os.getenv("FLASK_CONFIG", "dev"))


def _no_empty_revisions(context_, revision, directives):
    # `flask db migrate` без изменений схемы не создаёт пустой файл
    if getattr(config.cmd_opts, "autogenerate", False) and directives[0].upgrade_ops.is_empty():
        directives[:] = []
        log.info("schema unchanged, no revision generated")


def _configure(**kwargs):
    context.configure(
        target_metadata=db.metadata,
        render_as_batch=True,       # ALTER TABLE в SQLite только через batch
        compare_type=True,          # Date/String/Boolean колонки сравниваются по типу
        process_revision_directives=_no_empty_revisions,
        **kwargs,
    )


with flask_app.app_context():
    url = config.get_main_option("sqlalchemy.url") or str(db.engine.url)
    if context.is_offline_mode():
        _configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
        with context.begin_transaction():
            context.run_migrations()
    else:
        with db.engine.connect() as connection:
            _configure(connection=connection)
            with context.begin_transaction():
                context.run_migrations()
