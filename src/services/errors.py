from typing import Optional


class ApiError(Exception):
    """Base de todos os erros que o cliente KMT entrega para a UI."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class TransportError(ApiError):
    """Falha antes de existir resposta HTTP (offline, DNS, conexão recusada...)."""


class HttpError(ApiError):
    """Resposta não-2xx. `text` é o corpo bruto, útil para diagnóstico."""

    def __init__(self, status: int, text: str = "", reason: str = "", url: Optional[str] = None):
        super().__init__(f"{status}: {text or reason}", url=url)
        self.status = status
        self.text = text
        self.reason = reason


class UnauthorizedError(HttpError):
    """HTTP 401: a sessão local deixou de valer."""


class ResponseValidationError(ApiError):
    """Resposta 2xx cujo payload não bate com o schema esperado."""


class LoginError(ApiError):
    """O login respondeu 2xx mas sem token utilizável."""


def classify_status(status: int, text: str, reason: str, url: str) -> HttpError:
    if status == 401:
        return UnauthorizedError(status, text, reason, url=url)
    return HttpError(status, text, reason, url=url)
