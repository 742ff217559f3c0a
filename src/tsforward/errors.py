from enum import Enum


class ErrorKind(str, Enum):
    FETCH = "fetch"
    TRANSLATE = "translate"
    DISPATCH = "dispatch"
    CONFIG = "config"


class ScraperError(Exception):
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FetchError(ScraperError):
    """Network, HTTP status or exposition parse failure"""

    kind = ErrorKind.FETCH


class TranslateError(ScraperError):
    kind = ErrorKind.TRANSLATE


class DispatchError(ScraperError):
    kind = ErrorKind.DISPATCH


class ConfigError(ScraperError):
    kind = ErrorKind.CONFIG
