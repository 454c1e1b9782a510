import sqlite3
from contextlib import closing
from typing import Dict, Iterable, Optional
from src.data.db_context import create_connection, get_db_path

class KVStore:
    """Gerencia persistência de metadados simples (Chave-Valor) em SQLite"""

    def __init__(self, path: str = None):
        self.db_path = get_db_path(path)
        self._init_table()

    def _connect(self) -> sqlite3.Connection:
        return create_connection(self.db_path)

    def _init_table(self):
        with closing(self._connect()) as conn, conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sys_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

    def get(self, key: str) -> Optional[str]:
        """Retorna o valor bruto ou None se a chave não existir"""
        with closing(self._connect()) as conn:
            cursor = conn.execute("SELECT value FROM sys_meta WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row[0] if row else None

    def set(self, key: str, value: str):
        self.set_many({key: value})

    def set_many(self, items: Dict[str, str]):
        """Grava várias chaves na mesma transação (tudo ou nada)"""
        with closing(self._connect()) as conn, conn:
            conn.executemany(
                "INSERT OR REPLACE INTO sys_meta (key, value) VALUES (?, ?)",
                list(items.items())
            )

    def delete(self, *keys: str):
        self.delete_many(keys)

    def delete_many(self, keys: Iterable[str]):
        with closing(self._connect()) as conn, conn:
            conn.executemany(
                "DELETE FROM sys_meta WHERE key = ?",
                [(k,) for k in keys]
            )
