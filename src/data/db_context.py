import sqlite3
import os

DATABASE_NAME = "kmt_session.db"

def get_db_path(path: str = None) -> str:
    """
    Define o caminho do banco local da sessão.
    Prioridade: argumento explícito > KMT_SESSION_DB > arquivo padrão no diretório atual.
    """
    if path:
        return path
    return os.getenv("KMT_SESSION_DB", DATABASE_NAME)

def create_connection(path: str = None) -> sqlite3.Connection:
    """
    Cria conexão com o arquivo de sessão.
    check_same_thread=False porque a UI (Flet) chama a partir de threads diferentes.
    """
    db_path = get_db_path(path)
    conn = sqlite3.connect(db_path, timeout=10.0, check_same_thread=False)

    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")

    return conn
