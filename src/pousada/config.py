from __future__ import annotations

import importlib
import os
import logging
from typing import Optional, Type

from dotenv import load_dotenv

from pousada.base_config import PousadaConfig
from pousada.adapters.base import PousadaBackend
from pousada.adapters.http_adapter import DEFAULT_API_URL, DEFAULT_TIMEOUT, HttpPousadaAdapter
from pousada.exceptions import ConfigurationError
from pousada.models import PaymentMethod

load_dotenv()

DEFAULT_CONFIG_CLASS = "pousada.config.EnvironmentPousadaConfig"
CONFIG_ENV_KEY = "POUSADA_CONFIG"

logger = logging.getLogger(__name__)


def _import_config_class(path: str) -> Type[PousadaConfig]:
    try:
        module_path, class_name = path.rsplit(".", 1)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid config path '{path}'") from exc

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import module '{module_path}'") from exc

    try:
        cls = getattr(module, class_name)
    except AttributeError as exc:
        raise ConfigurationError(f"Config class '{class_name}' not found in '{module_path}'") from exc

    if not isinstance(cls, type) or not issubclass(cls, PousadaConfig):
        raise ConfigurationError(f"{path} is not a subclass of PousadaConfig")

    return cls


class EnvironmentPousadaConfig(PousadaConfig):
    """Default configuration that reads from environment variables."""

    def __init__(self) -> None:
        self._env = os.environ

    def get_api_url(self) -> str:
        return self._env.get("POUSADA_API_URL") or DEFAULT_API_URL

    def get_http_timeout(self) -> float:
        try:
            return float(self._env.get("POUSADA_HTTP_TIMEOUT", DEFAULT_TIMEOUT))
        except (TypeError, ValueError):
            logger.warning(f"Invalid POUSADA_HTTP_TIMEOUT: {self._env.get('POUSADA_HTTP_TIMEOUT')!r}")
            return DEFAULT_TIMEOUT

    def get_telegram_bot_token(self) -> Optional[str]:
        return self._env.get("TELEGRAM_BOT_TOKEN")

    def get_default_payment_method(self) -> PaymentMethod:
        raw = self._env.get("POUSADA_PAYMENT_METHOD")
        if not raw:
            return super().get_default_payment_method()
        try:
            return PaymentMethod(raw.strip().upper())
        except ValueError:
            logger.warning(f"Invalid POUSADA_PAYMENT_METHOD: {raw!r}")
            return super().get_default_payment_method()

    def get_business_name(self) -> str:
        return self._env.get("POUSADA_NAME", super().get_business_name())

    def create_backend(self) -> PousadaBackend:
        return HttpPousadaAdapter(self.get_api_url(), timeout=self.get_http_timeout())


_CONFIG: Optional[PousadaConfig] = None


def get_config() -> PousadaConfig:
    global _CONFIG
    if _CONFIG is None:
        class_path = os.getenv(CONFIG_ENV_KEY, DEFAULT_CONFIG_CLASS)
        cls = _import_config_class(class_path)
        _CONFIG = cls()
    return _CONFIG


def set_config(config: Optional[PousadaConfig]) -> None:
    global _CONFIG
    _CONFIG = config
