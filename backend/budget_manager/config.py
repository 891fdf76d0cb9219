import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

DEFAULT_JWT_SECRET_KEY = "remplacer_par_une_vraie_cle_secrete_forte"


class Settings(BaseSettings):
    """Configuration globale de l'application (surchargeable par variables d'environnement)."""

    # --- Base de Données ---
    # Si DATABASE_URL est défini il est prioritaire sur les champs POSTGRES_*
    DATABASE_URL: Optional[str] = None
    POSTGRES_DB: str = "budgets"
    POSTGRES_USER: str = "budgets"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    DB_ECHO_LOG: bool = False
    DB_CREATE_TABLES: bool = True

    # --- API ---
    API_V1_PREFIX: str = "/api/v1"
    BACKEND_PUBLIC_URL: str = "http://localhost:8000"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    # --- Stockage des images ---
    STATIC_DIR: str = "static"
    IMAGE_BUCKET: str = "budget-images"

    # --- JWT (jetons émis par le fournisseur d'identité externe) ---
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    OAUTH2_TOKEN_URL: str = "/auth/token"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- Messages Génériques ---
    BUDGET_SAVE_ERROR_MSG: str = "Erreur lors de l'enregistrement du budget."
    BUDGET_LOAD_ERROR_MSG: str = "Erreur lors du chargement du budget."
    CLIENT_ERROR_MSG: str = "Erreur lors du traitement du client."
    PDF_ERROR_MSG: str = "Erreur lors de la génération du PDF."
    DASHBOARD_ERROR_MSG: str = "Erreur lors du chargement des statistiques."

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        """URL de connexion async, construite depuis les champs POSTGRES_* si besoin."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()

if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET_KEY:
    logger.warning("La variable JWT_SECRET_KEY utilise la valeur par défaut. Veuillez définir une clé secrète forte.")

logger.info(f"Configuration chargée: DB={settings.POSTGRES_DB}@{settings.POSTGRES_HOST}, static={settings.STATIC_DIR}")
