from .operator_panel import create_operator_panel_app, run_operator_panel

__all__ = ["create_operator_panel_app", "run_operator_panel"]
