"""
Base configuration abstractions for the Pousada operator panel.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from pousada.adapters.base import PousadaBackend
from pousada.models import PaymentMethod


class PousadaConfig(ABC):
    """Abstract configuration contract for the panel and its backend client."""

    @abstractmethod
    def get_api_url(self) -> str: pass

    @abstractmethod
    def get_http_timeout(self) -> float: pass

    @abstractmethod
    def get_telegram_bot_token(self) -> Optional[str]: pass

    @abstractmethod
    def create_backend(self) -> PousadaBackend: pass

    def get_default_payment_method(self) -> PaymentMethod: return PaymentMethod.DINHEIRO
    def get_business_name(self) -> str: return "Pousada"
