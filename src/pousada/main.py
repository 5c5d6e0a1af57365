from __future__ import annotations
import asyncio
import logging

from pousada.adapters.base import PousadaBackend
from pousada.channels import create_operator_panel_app, run_operator_panel
from pousada.config import get_config
from pousada.services import DashboardService, NotificationService

logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)
logger = logging.getLogger(__name__)


def build_dashboard(backend: PousadaBackend, notifications: NotificationService) -> DashboardService:
    """Wires backend -> dashboard and loads the first snapshot."""
    config = get_config()
    dashboard = DashboardService(
        backend=backend,
        notifications=notifications,
        default_payment_method=config.get_default_payment_method(),
    )
    dashboard.refresh()
    # Startup notifications are only logged; the operator sees the demo banner on /resumo.
    notifications.drain()
    return dashboard


def main():
    backend = None
    try:
        config = get_config()
        backend = config.create_backend()
        notifications = NotificationService()
        dashboard = build_dashboard(backend, notifications)
        app = create_operator_panel_app(
            config.get_telegram_bot_token(),
            dashboard,
            notifications,
            business_name=config.get_business_name(),
        )
        asyncio.run(run_operator_panel(app))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as e:
        logger.error(f"System Error: {e}", exc_info=True)
    finally:
        if backend is not None:
            backend.close()
            logger.info("Backend client closed")


if __name__ == "__main__":
    main()
