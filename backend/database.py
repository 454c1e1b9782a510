import os
from dotenv import load_dotenv
from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

# Carrega as variáveis do arquivo .env
load_dotenv()

# Sem DATABASE_URL o mock roda em SQLite em memória (some ao reiniciar)
DEFAULT_DATABASE_URL = "sqlite://"

def build_engine(database_url: str = None) -> Engine:
    url = database_url or os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL

    if url.startswith("sqlite"):
        # StaticPool: a mesma conexão em memória é compartilhada entre threads
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url)

def init_db(engine: Engine):
    """Cria as tabelas do mock (resources, access_tokens)"""
    # Import garante o registro das tabelas no metadata
    from backend import models  # noqa: F401
    SQLModel.metadata.create_all(engine)

def get_session(request: Request):
    """Injeção de dependência para rotas FastAPI"""
    with Session(request.app.state.engine) as session:
        yield session
