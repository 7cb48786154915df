"""
Centralized configuration for the Assistant-Lite engine.

Loads all environment variables and provides typed configuration objects.
Keyword vocabularies and confidence cutoffs live here so the heuristic
classifier can be tuned without touching the planner.
"""

import os
from typing import Optional
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


DEFAULT_VIDEO_KEYWORDS = "film,video,wideo,top,najleps,najsilniejs,best,strongest"
DEFAULT_RISK_KEYWORDS = "anomal,spad,skok,ryzyk,trend,drop,spike,risk"


def _split_keywords(raw: str) -> list[str]:
    """Split a comma separated keyword list, dropping blanks."""
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


@dataclass
class DatabaseConfig:
    """Local metrics store connection configuration."""

    database_url: Optional[str] = field(
        default_factory=lambda: os.getenv("DATABASE_URL"))
    sqlite_path: str = field(default_factory=lambda: os.getenv(
        "ASSISTANT_SQLITE_PATH", "./assistant_lite.db"))
    echo: bool = field(default_factory=lambda: os.getenv(
        "DB_ECHO", "false").lower() == "true")

    @property
    def url(self) -> str:
        """
        Build the SQLAlchemy connection URL.

        Prioritizes DATABASE_URL if set, otherwise falls back to a local
        SQLite file.
        """
        if self.database_url:
            url = self.database_url
            # Normalize postgres:// to postgresql://
            if url.startswith("postgres://"):
                return url.replace("postgres://", "postgresql://", 1)
            return url

        return f"sqlite:///{self.sqlite_path}"


@dataclass
class AssistantConfig:
    """Heuristics and limits for tool selection and answer synthesis."""

    video_keywords: list[str] = field(default_factory=lambda: _split_keywords(
        os.getenv("ASSISTANT_VIDEO_KEYWORDS", DEFAULT_VIDEO_KEYWORDS)))
    risk_keywords: list[str] = field(default_factory=lambda: _split_keywords(
        os.getenv("ASSISTANT_RISK_KEYWORDS", DEFAULT_RISK_KEYWORDS)))
    high_confidence_min_evidence: int = field(default_factory=lambda: int(
        os.getenv("ASSISTANT_HIGH_CONFIDENCE_MIN_EVIDENCE", "5")))
    medium_confidence_min_evidence: int = field(default_factory=lambda: int(
        os.getenv("ASSISTANT_MEDIUM_CONFIDENCE_MIN_EVIDENCE", "3")))
    top_videos_limit: int = field(default_factory=lambda: int(
        os.getenv("ASSISTANT_TOP_VIDEOS_LIMIT", "3")))
    anomalies_limit: int = field(default_factory=lambda: int(
        os.getenv("ASSISTANT_ANOMALIES_LIMIT", "3")))
    default_range_days: int = field(default_factory=lambda: int(
        os.getenv("ASSISTANT_DEFAULT_RANGE_DAYS", "30")))
    max_follow_up_questions: int = 4
    thread_title_max_length: int = 96
    thousands_separator: str = field(default_factory=lambda: os.getenv(
        "ASSISTANT_THOUSANDS_SEPARATOR", ","))


@dataclass
class ServerConfig:
    """Server runtime configuration."""

    host: str = field(default_factory=lambda: os.getenv(
        "SERVER_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(
        os.getenv("SERVER_PORT", "8001")))
    debug: bool = field(default_factory=lambda: os.getenv(
        "DEBUG", "false").lower() == "true")
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    cors_origins: list[str] = field(
        default_factory=lambda: os.getenv("CORS_ORIGINS", "*").split(",")
    )


@dataclass
class Config:
    """
    Root configuration object aggregating all config sections.

    Usage:
        config = Config()
        db_url = config.database.url
        cutoff = config.assistant.high_confidence_min_evidence
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of warnings/errors.

        Returns:
            List of validation messages (empty if all valid)
        """
        warnings = []
        assistant = self.assistant

        if not assistant.video_keywords:
            warnings.append(
                "ASSISTANT_VIDEO_KEYWORDS is empty - read_top_videos will never be selected")

        if not assistant.risk_keywords:
            warnings.append(
                "ASSISTANT_RISK_KEYWORDS is empty - read_anomalies will never be selected")

        if assistant.medium_confidence_min_evidence > assistant.high_confidence_min_evidence:
            warnings.append(
                "Medium confidence cutoff is above the high cutoff - 'medium' is unreachable")

        if assistant.default_range_days < 1:
            warnings.append("ASSISTANT_DEFAULT_RANGE_DAYS must be at least 1")

        return warnings


# Global config instance - import and use this
config = Config()
