#!/usr/bin/env python3
"""Configuration module for tradelog"""

import os
import logging
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _enable_sqlite_savepoints(engine):
    """Let SQLAlchemy own BEGIN so pysqlite SAVEPOINTs work; enforce foreign keys"""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


class Config:
    """Application configuration"""

    # Environment
    ENV = os.getenv("TRADELOG_ENV", "development")

    # Database configuration
    DB_PATH = Path(
        os.getenv("TRADELOG_DB_PATH", str(Path.home() / ".tradelog" / "tradelog.db"))
    )
    DB_URL = f"sqlite:///{DB_PATH}"

    # Logging configuration
    LOG_LEVEL = os.getenv("TRADELOG_LOG_LEVEL", "INFO")
    LOG_PATH = Path(
        os.getenv("TRADELOG_LOG_PATH", str(Path.home() / ".tradelog" / "tradelog.log"))
    )

    # Import / export behaviour
    IMPORT_STRICT_ROW_WRITES = _env_flag("TRADELOG_IMPORT_STRICT_ROW_WRITES")
    EXPORT_PREFIX = os.getenv("TRADELOG_EXPORT_PREFIX", "orders_")

    @classmethod
    def ensure_db_directory(cls):
        """Create database and log directories if they don't exist"""
        if str(cls.DB_PATH) != ":memory:":
            cls.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        if cls.ENV == "production":
            cls.LOG_PATH.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_engine(cls):
        """Get SQLAlchemy engine with proper configuration"""
        cls.ensure_db_directory()
        echo = cls.ENV == "development" and cls.LOG_LEVEL == "DEBUG"
        engine = create_engine(cls.DB_URL, echo=echo)
        if engine.dialect.name == "sqlite":
            _enable_sqlite_savepoints(engine)
        return engine

    @classmethod
    def get_session_maker(cls, engine=None):
        """Get SQLAlchemy session maker, bound to engine or a fresh one"""
        if engine is None:
            engine = cls.get_engine()
        return sessionmaker(bind=engine)

    @classmethod
    def setup_logging(cls):
        """Setup application logging"""
        cls.ensure_db_directory()

        logger = logging.getLogger("tradelog")
        logger.setLevel(getattr(logging, cls.LOG_LEVEL))

        # Clear existing handlers
        logger.handlers.clear()

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, cls.LOG_LEVEL))
        console_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        # File handler
        if cls.ENV == "production":
            file_handler = logging.FileHandler(cls.LOG_PATH)
            file_handler.setLevel(logging.INFO)
            file_formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

        return logger


class DevelopmentConfig(Config):
    """Development environment configuration"""

    ENV = "development"
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production environment configuration"""

    ENV = "production"
    LOG_LEVEL = "INFO"


class TestingConfig(Config):
    """Testing environment configuration"""

    ENV = "testing"
    LOG_LEVEL = "DEBUG"
    DB_PATH = Path(":memory:")
    DB_URL = "sqlite:///:memory:"
    IMPORT_STRICT_ROW_WRITES = False


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(env=None):
    """Get configuration for specified environment"""
    if env is None:
        env = os.getenv("TRADELOG_ENV", "development")
    return config_map.get(env, DevelopmentConfig)
