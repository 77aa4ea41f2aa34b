"""reqflow_api."""

from .monitoring.logger import configure_logger

# Configure logger with default settings (console logging)
# create_app re-configures it with the level from Settings
configure_logger()
