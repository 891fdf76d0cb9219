"""
Module définissant les modèles SQLModel pour l'entité User.

Les comptes sont gérés par le fournisseur d'identité externe ; cette table
conserve le profil local référencé par les clients et les budgets.
"""
from typing import Optional
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field
from pydantic import EmailStr


class UserBase(SQLModel):
    """Modèle SQLModel de base pour un utilisateur (données communes)."""
    email: EmailStr = Field(unique=True, index=True, max_length=255, nullable=False)
    full_name: Optional[str] = Field(default=None, max_length=100)
    is_admin: bool = Field(default=False, nullable=False)


class User(UserBase, table=True):
    """Modèle de table SQLModel pour les utilisateurs."""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)


class UserRead(UserBase):
    """Schéma de lecture d'un utilisateur."""
    id: int
