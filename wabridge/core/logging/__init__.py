from .logger import get_logger, setup_app_logging, setup_logging

__all__ = ["get_logger", "setup_logging", "setup_app_logging"]
