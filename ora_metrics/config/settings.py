"""
============================================================================
Settings - Configuration centralisée avec Pydantic
============================================================================
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration centralisée du collecteur Oracle.

    Charge automatiquement depuis .env et variables d'environnement.
    Validation automatique des types et valeurs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignorer variables d'env non définies
    )

    # =========================================================================
    # Oracle
    # =========================================================================
    # Format : user/password@host:port/service/instance
    ora_url: str = Field(
        default="perfstat/perfstat@localhost:1521/orcl/orcl",
        alias="ORA_URL",
    )
    # Fichiers SQL séparés par des virgules
    ora_files_raw: str = Field(default="sql/default.sql", alias="ORA_FILES")
    # Durée maximale (secondes) de chaque requête du catalogue
    sql_seconds: int = Field(default=10, alias="ORA_SQL_SECONDS")
    # Remplace l'instance extraite de l'URL dans le tag orainstance
    instance_tag: Optional[str] = Field(default=None, alias="ORA_INSTANCE_TAG")
    # Timeout driver par aller-retour (0 = désactivé)
    call_timeout_ms: int = Field(default=0, alias="ORA_CALL_TIMEOUT_MS")

    # =========================================================================
    # Métriques
    # =========================================================================
    measurement: str = Field(default="ora", alias="ORA_MEASUREMENT")

    # =========================================================================
    # Dagster
    # =========================================================================
    collection_cron: str = Field(default="* * * * *", alias="ORA_COLLECTION_CRON")
    execution_timezone: str = Field(default="UTC", alias="ORA_TIMEZONE")

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(
        default="json",  # ou "console"
        alias="LOG_FORMAT"
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def ora_files(self) -> list[Path]:
        """Liste des fichiers de définition SQL"""
        if not self.ora_files_raw or self.ora_files_raw.strip() == "":
            return []
        return [Path(f.strip()) for f in self.ora_files_raw.split(",") if f.strip()]

    @property
    def sql_timeout(self) -> float:
        """Timeout par requête en secondes (float pour concurrent.futures)"""
        return float(self.sql_seconds)

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("sql_seconds")
    @classmethod
    def validate_sql_seconds(cls, v: int) -> int:
        """Valider le timeout par requête"""
        if v <= 0:
            raise ValueError(f"ORA_SQL_SECONDS must be positive, got {v}")
        return v

    @field_validator("call_timeout_ms")
    @classmethod
    def validate_call_timeout(cls, v: int) -> int:
        """Valider le timeout driver"""
        if v < 0:
            raise ValueError(f"ORA_CALL_TIMEOUT_MS must be >= 0, got {v}")
        return v

    @field_validator("instance_tag")
    @classmethod
    def validate_instance_tag(cls, v: Optional[str]) -> Optional[str]:
        """Chaîne vide = pas de surcharge"""
        if v is None or v.strip() == "":
            return None
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Valider le niveau de log"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Valider le format de log"""
        v_lower = v.lower()
        if v_lower not in ("json", "console"):
            raise ValueError(f"Invalid log format: {v}. Must be 'json' or 'console'")
        return v_lower


# =============================================================================
# Singleton Pattern
# =============================================================================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Obtenir l'instance singleton des settings.

    Usage:
        from ora_metrics.config.settings import get_settings
        settings = get_settings()
        print(settings.ora_files)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """
    Réinitialiser le singleton (utile pour tests).
    """
    global _settings
    _settings = None
