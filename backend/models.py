from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel
from src.models.base import utc_now

class ResourceRecord(SQLModel, table=True):
    """
    Tabela genérica do mock: um registro de QUALQUER recurso KMT.
    O conteúdo fica em `payload` (JSON) com as chaves em camelCase.
    """
    __tablename__ = "resources"

    id: Optional[int] = Field(default=None, primary_key=True)
    resource: str = Field(index=True)
    payload: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now)

class AccessToken(SQLModel, table=True):
    __tablename__ = "access_tokens"

    token: str = Field(primary_key=True)
    email: str
    created_at: datetime = Field(default_factory=utc_now)
