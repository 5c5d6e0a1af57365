from .base import PousadaBackend
from .http_adapter import HttpPousadaAdapter

__all__ = ["PousadaBackend", "HttpPousadaAdapter"]
