"""Core runtime utilities for Sara."""

from .config_loader import (
    clear_config_cache,
    get_mode,
    get_model_config,
    get_site_url,
    is_demo,
    load_config,
)
from .errors import (
    AuthzError,
    DomainInvariantError,
    ExpiredError,
    ForbiddenRoleError,
    ModeError,
    NoRoleAssignedError,
    NotFoundError,
    SaraError,
    ToolArgumentError,
    UnknownToolError,
    UpstreamError,
    ValidationError,
)
from .logger import get_logger, setup_logging
from .tool_context import ToolContext

__all__ = [
    "AuthzError",
    "DomainInvariantError",
    "ExpiredError",
    "ForbiddenRoleError",
    "ModeError",
    "NoRoleAssignedError",
    "NotFoundError",
    "SaraError",
    "ToolArgumentError",
    "ToolContext",
    "UnknownToolError",
    "UpstreamError",
    "ValidationError",
    "clear_config_cache",
    "get_logger",
    "get_mode",
    "get_model_config",
    "get_site_url",
    "is_demo",
    "load_config",
    "setup_logging",
]
