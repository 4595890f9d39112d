"""Configuration settings for the term count audit.

A small Settings container shared by the CLI, the API and the repository
helpers. Tests override fields with ``monkeypatch.setattr``.
"""
from dataclasses import dataclass


@dataclass
class Settings:
    DB_PATH: str = "data/app.db"
    STORAGE_PATH: str = "storage"
    ATTACHMENT_TYPE: str = "attachment"
    PUBLISH_STATUS: str = "publish"
    INHERIT_STATUS: str = "inherit"


settings = Settings()
