"""Core domain types: results, exit codes, configuration and its storage."""

from .config import ConfigError, GlobalConfig, ProjectConfig, ProjectInfo
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok
from .store import ConfigStore

__all__ = [
    # config
    "ConfigError",
    "GlobalConfig",
    "ProjectConfig",
    "ProjectInfo",
    # store
    "ConfigStore",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
