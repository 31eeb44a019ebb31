from .config import DEFAULT_CONFIG, browser_config_from
from .driver import Driver
from .session import BrowserSession, BrowserSessionManager

__all__ = ["DEFAULT_CONFIG", "browser_config_from", "Driver", "BrowserSession", "BrowserSessionManager"]
