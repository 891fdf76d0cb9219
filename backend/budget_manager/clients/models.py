from typing import Optional, List
from datetime import datetime, timezone

from pydantic import EmailStr, field_validator
from sqlmodel import SQLModel, Field


class ClientBase(SQLModel):
    """Champs communs d'un client."""
    name: str = Field(..., min_length=1, max_length=255, index=True)
    brand: Optional[str] = Field(default=None, max_length=255)
    email: Optional[EmailStr] = Field(default=None, max_length=255)
    reference_notes: Optional[str] = Field(default=None)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Le nom du client est obligatoire.")
        return value


class Client(ClientBase, table=True):
    """Modèle de table pour un client."""
    __tablename__ = "clients"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ClientCreate(ClientBase):
    """Schéma pour créer un client via l'API."""
    pass


class ClientCreateInternal(ClientBase):
    """Schéma de création complété avec le propriétaire (non exposé à l'API)."""
    user_id: int


class ClientUpdate(SQLModel):
    """Schéma pour la mise à jour partielle d'un client."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    brand: Optional[str] = Field(default=None, max_length=255)
    email: Optional[EmailStr] = Field(default=None, max_length=255)
    reference_notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> str:
        # Champ facultatif, mais jamais vide ni null quand il est fourni
        if value is None or not value.strip():
            raise ValueError("Le nom du client est obligatoire.")
        return value.strip()


class ClientRead(ClientBase):
    """Schéma pour lire un client depuis l'API."""
    id: int
    user_id: int
    created_at: datetime
    updated_at: datetime


class PaginatedClientRead(SQLModel):
    items: List[ClientRead]
    total: int
