from __future__ import annotations
import os
from importlib import import_module
from flask import Flask
from config import config_map
from extensions import db, migrate, login_manager
from werkzeug.security import generate_password_hash
from sqlalchemy import inspect

def _seed_from_config(app):
    if not app.config.get("SEED_TEST_DATA"):
        return
    with app.app_context():
        # таблица users может ещё не быть создана (alembic upgrade и т.п.)
        if not inspect(db.engine).has_table("users"):
            return

        from models import User  # локальный импорт, чтобы избежать циклов
        created = 0
        for u in app.config.get("DEFAULT_USERS", []):
            if User.query.filter_by(username=u["username"]).first():
                continue
            db.session.add(User(
                username=u["username"],
                password_hash=generate_password_hash(u["password"]),
                is_active_flag=True,
            ))
            created += 1
        if created:
            db.session.commit()
            app.logger.info("seeded %d default users", created)

def register_blueprints(app: Flask) -> None:
    # core регистрирует логирование и CORS, поэтому подключаем его первым
    import_module("blueprints.core.routes")
    from blueprints.core import bp as core_bp
    from blueprints.auth.routes import api_bp as auth_api_bp
    from blueprints.schedule.routes import api_bp as schedule_api_bp
    from blueprints.proposal.routes import api_bp as proposal_api_bp

    app.register_blueprint(core_bp)
    app.register_blueprint(auth_api_bp, url_prefix="/api")
    app.register_blueprint(schedule_api_bp, url_prefix="/api")
    app.register_blueprint(proposal_api_bp, url_prefix="/api")

def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    cfg_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config_map[cfg_name])
    # pytest всегда выставляет PYTEST_CURRENT_TEST: держим БД в памяти,
    # чтобы изменения одного теста не протекали в другой
    if os.environ.get("PYTEST_CURRENT_TEST"):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"

    from blueprints.proposal.policies import get_policy
    get_policy(app.config["CONSENT_POLICY"])  # неизвестная политика: ошибка при старте

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    register_blueprints(app)
    _seed_from_config(app)
    return app
