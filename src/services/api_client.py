import httpx
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Type

from pydantic import TypeAdapter, ValidationError

from src.config import Config
from src.models.base import KMTModel
from src.models.kmt import ApiEnvelope
from src.services.errors import (
    ApiError,
    ResponseValidationError,
    TransportError,
    classify_status,
)

logger = logging.getLogger("ApiClient")

ErrorHandler = Callable[[ApiError], None]


class TokenSource(Protocol):
    def get_token(self) -> Optional[str]: ...


def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Remove filtros sem valor: None e string vazia não vão para a query string"""
    if not params:
        return {}
    return {k: v for k, v in params.items() if v is not None and v != ""}


def create_http_client(config: Config) -> httpx.Client:
    if config.timeout_seconds is None:
        return httpx.Client(base_url=config.api_base_url)
    return httpx.Client(base_url=config.api_base_url, timeout=config.timeout_seconds)


class ApiClient:
    """
    Único ponto de saída HTTP para o backend KMT.
    Cada chamada é UMA tentativa: sem retry, sem cache, sem deduplicação.
    """

    def __init__(self, http_client: httpx.Client, session: TokenSource):
        self.client = http_client
        self.session = session
        self.error_handlers: List[ErrorHandler] = []

    def add_error_handler(self, handler: ErrorHandler):
        """Interceptores chamados com o erro já classificado, antes de ele subir"""
        self.error_handlers.append(handler)

    def close(self):
        self.client.close()

    def _build_headers(self, extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.session.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        response_model: Optional[Type[KMTModel]] = None,
    ) -> Any:
        if isinstance(body, KMTModel):
            body = body.to_wire()

        request_headers = self._build_headers(headers)
        logger.info(f"{method} {path} (token={'Authorization' in request_headers})")

        try:
            response = self.client.request(
                method,
                path,
                json=body,
                headers=request_headers,
                params=clean_params(params),
            )
        except httpx.TransportError as e:
            error = TransportError(f"Falha de rede em {method} {path}: {e}", url=path)
            logger.error(str(error))
            self._dispatch(error)
            raise error from e

        if not response.is_success:
            error = classify_status(
                response.status_code,
                response.text,
                response.reason_phrase,
                str(response.url),
            )
            logger.error(
                f"KMT API Error: {response.status_code} {response.reason_phrase} "
                f"{method} {response.url} -> {response.text!r}"
            )
            self._dispatch(error)
            raise error

        payload = self._parse_body(response)
        if response_model is None:
            return payload
        return self._validate(payload, response_model, path)

    def _parse_body(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            data = response.json()
        except ValueError:
            # Corpo que não é JSON: devolve o texto cru
            return response.text

        if ApiEnvelope.matches(data):
            try:
                envelope = ApiEnvelope.model_validate(data)
            except ValidationError as e:
                # Metadados com tipo inesperado (ex.: message numérica): fica só com `data`
                logger.warning(f"Envelope com metadados inválidos em {response.url}: {e}")
                return data["data"]
            if envelope.success is False:
                logger.warning(f"Envelope com success=false em {response.url}: {envelope.message}")
            return envelope.data
        return data

    def _validate(self, payload: Any, model: Type[KMTModel], path: str) -> Any:
        try:
            if isinstance(payload, list):
                return TypeAdapter(List[model]).validate_python(payload)
            return model.model_validate(payload)
        except ValidationError as e:
            error = ResponseValidationError(
                f"Resposta inesperada de {path} ({model.__name__}): {e}", url=path
            )
            self._dispatch(error)
            raise error from e

    def _dispatch(self, error: ApiError):
        for handler in self.error_handlers:
            handler(error)
