from __future__ import annotations

from dataclasses import dataclass

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "academix")),
            connect_timeout=int(db_config.get("connect_timeout", 10)),
        )


class DatabaseConnection:
    """Opens one short-lived MySQL connection per repository call.

    Every record store operation is a single round trip, so nothing is pooled.
    """

    def __init__(self, config: DBConfig):
        self.config = config

    @classmethod
    def from_dict(cls, db_config: dict) -> "DatabaseConnection":
        return cls(DBConfig.from_dict(db_config))

    def connect(self, *, with_database: bool = True):
        params = {
            "host": self.config.host,
            "port": self.config.port,
            "user": self.config.user,
            "password": self.config.password,
            "connection_timeout": self.config.connect_timeout,
            "charset": "utf8mb4",
            "use_pure": True,
        }
        if with_database:
            params["database"] = self.config.database
        return mysql.connector.connect(**params)
