from __future__ import annotations
import os
from pathlib import Path

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    BASE_DIR = Path(__file__).resolve().parent
    # SQLite file in project directory
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'app.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # single | bilateral | duel
    CONSENT_POLICY = os.getenv("CONSENT_POLICY", "bilateral")
    AUTH_RL_MAX = 5
    AUTH_RL_WINDOW = 300  # 5 минут
    STATS_MONTHS = 12
    STATS_MAX_DAYS = 3660  # ~10 лет

class DevConfig(BaseConfig):
    DEBUG = True
    SEED_TEST_DATA = True
    DEFAULT_USERS = [
        {"username": "Jennifer", "password": "jennifer"},
        {"username": "Klas",     "password": "klas"},
    ]

class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    AUTH_RL_MAX = 100
    SEED_TEST_DATA = False
    DEFAULT_USERS = []

class ProdConfig(BaseConfig):
    DEBUG = False
    JSON_SORT_KEYS = False
    SEED_TEST_DATA = False
    DEFAULT_USERS = []

config_map = {
    "dev": DevConfig,
    "test": TestConfig,
    "prod": ProdConfig,
    "default": DevConfig,
}

# участники расписания; порядок фиксирован, больше двух не поддерживается
PARTIES = ("Jennifer", "Klas")
