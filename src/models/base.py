from datetime import datetime, timezone
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel

# Função auxiliar para timestamps UTC
def utc_now():
    return datetime.now(timezone.utc)

class KMTModel(SQLModel):
    """
    Classe Base para todos os payloads trocados com o backend KMT.
    Campos em snake_case no Python, camelCase no fio (JSON).
    Campos desconhecidos enviados pelo servidor são ignorados.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Serializa com as chaves exatas esperadas pelo backend"""
        return self.model_dump(mode="json", by_alias=True)
