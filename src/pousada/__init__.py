"""Pousada Panel - operator dashboard for a small lodging business"""

__version__ = "0.1.0"

# Core abstractions
from .base_config import PousadaConfig

# Exceptions
from .exceptions import (
    PousadaError,
    ConfigurationError,
    BackendError,
    BackendUnavailableError,
    ValidationError,
    BookingValidationError,
    ChannelError,
)

# Config management
from .config import get_config, set_config

# Adapters
from .adapters.base import PousadaBackend
from .adapters.http_adapter import HttpPousadaAdapter

# Services
from .services import DashboardService, NotificationService

__all__ = [
    # Version
    "__version__",

    # Core
    "PousadaConfig",

    # Exceptions
    "PousadaError",
    "ConfigurationError",
    "BackendError",
    "BackendUnavailableError",
    "ValidationError",
    "BookingValidationError",
    "ChannelError",

    # Config
    "get_config",
    "set_config",

    # Adapters
    "PousadaBackend",
    "HttpPousadaAdapter",

    # Services
    "DashboardService",
    "NotificationService",
]
