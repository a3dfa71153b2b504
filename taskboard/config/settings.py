"""
Application settings and configuration
"""

import os
from pathlib import Path
from dotenv import load_dotenv
from typing import Optional

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings:
    """Application settings loaded from environment variables"""

    # Document store
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "memory")  # "memory" or "firestore"
    TASKS_COLLECTION: str = os.getenv("TASKS_COLLECTION", "tasks")
    CONTACTS_COLLECTION: str = os.getenv("CONTACTS_COLLECTION", "contacts")
    POLL_INTERVAL: float = float(os.getenv("POLL_INTERVAL", "2.0"))

    # Firebase / Firestore
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "")
    FIREBASE_API_KEY: Optional[str] = os.getenv("FIREBASE_API_KEY", None)
    FIREBASE_ID_TOKEN: Optional[str] = os.getenv("FIREBASE_ID_TOKEN", None)
    FIRESTORE_DATABASE: str = os.getenv("FIRESTORE_DATABASE", "(default)")

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", str(Path(__file__).parent.parent.parent / "logs"))
    WEB_PORT: int = int(os.getenv("WEB_PORT", "8000"))

    @classmethod
    def validate(cls) -> bool:
        """Validate that all required settings are present"""
        if cls.STORE_BACKEND not in ("memory", "firestore"):
            raise ValueError(f"Unknown STORE_BACKEND: {cls.STORE_BACKEND}")

        if cls.STORE_BACKEND == "firestore" and not cls.FIREBASE_PROJECT_ID:
            raise ValueError(
                "Missing required environment variables: FIREBASE_PROJECT_ID"
            )

        return True


# Global settings instance
settings = Settings()
