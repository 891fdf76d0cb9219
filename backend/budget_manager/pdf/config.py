"""Configuration spécifique au module PDF.

Utilise Pydantic BaseSettings pour permettre la surcharge par
des variables d'environnement (préfixe PDF_).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class PDFSettings(BaseSettings):
    """Paramètres de configuration pour la génération de PDF."""

    LOGO_PATH: str = "static/logo.png"
    TMP_PDF_DIR: str = "temp_pdfs"  # Dossier de sauvegarde quand output_path n'a pas de dossier
    COMPANY_NAME: str = "Budget Manager"
    FOOTER_TEXT: str = "Document généré automatiquement - valeurs en euros (€)"
    PRIMARY_COLOR_HEX: str = "#4f46e5"
    # Nombre de lignes d'un tableau de lignes avant saut de page
    ROWS_PER_PAGE: int = 25

    model_config = SettingsConfigDict(
        env_prefix="PDF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

# Instance globale unique des paramètres (peut être utilisée directement ou injectée)
pdf_settings = PDFSettings()
