"""fm-actions: CloudBees Feature Management CLI."""

from .client import FeatureManagementClient
from .commands import CommandContext
from .exceptions import (
    ApiError,
    EntityNotFoundError,
    FmActionsError,
    FmActionsErrorCodes,
    ValidationError,
)
from .http_client import HttpFeatureManagementClient
from .memory import InMemoryFeatureManagementClient
from .merger import merge_configuration
from .models import (
    Application,
    ClientConfig,
    CreateFlagRequest,
    Environment,
    Flag,
    FlagConfiguration,
    FlagConfigurationDetail,
    FlagType,
)
from .outputs import OutputWriter
from .parsing import parse_value, parse_variants
from .resolver import EntityResolver

__all__ = [
    "FeatureManagementClient",
    "HttpFeatureManagementClient",
    "InMemoryFeatureManagementClient",
    "EntityResolver",
    "CommandContext",
    "OutputWriter",
    "merge_configuration",
    "parse_value",
    "parse_variants",
    "Application",
    "ClientConfig",
    "CreateFlagRequest",
    "Environment",
    "Flag",
    "FlagConfiguration",
    "FlagConfigurationDetail",
    "FlagType",
    "FmActionsError",
    "FmActionsErrorCodes",
    "ValidationError",
    "EntityNotFoundError",
    "ApiError",
]
