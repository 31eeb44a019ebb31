import logging
import os
from decimal import Decimal
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


class Timeouts(BaseModel):
    """Wait bounds in milliseconds and polling attempt counts."""

    navigation: int = 60000
    container: int = 20000
    spinner: int = 12000
    element: int = 12000
    removal: int = 8000
    shipping_ui: int = 20000
    confirmation: int = 40000
    scenario: int = 90000
    poll_interval: int = 300
    total_retry_interval: int = 1000
    cart_rows_attempts: int = Field(default=15, ge=1)
    assert_rows_attempts: int = Field(default=10, ge=1)
    total_attempts: int = Field(default=8, ge=1)
    checkout_total_attempts: int = Field(default=6, ge=1)

    def seconds(self, name: str) -> float:
        return getattr(self, name) / 1000


class Paths(BaseModel):
    home: str = "/"
    shop: str = "/shop/"
    cart: str = "/cart/"
    cart_fallbacks: List[str] = Field(default_factory=lambda: ["/?page_id=7", "/basket/"])
    checkout: str = "/checkout/"
    add_to_cart: str = "/?add-to-cart={product_id}"
    order_received: str = "order-received"


class BrowserSettings(BaseModel):
    headless: bool = True
    viewport: Dict[str, int] = Field(default_factory=lambda: {"width": 1280, "height": 720})
    language: str = "en-US"


class BillingDetails(BaseModel):
    first_name: str = "Test"
    last_name: str = "Buyer"
    address_1: str = "Rruga e Testit 1"
    city: str = "Tirana"
    postcode: str = "1001"
    phone: str = "+35560000000"
    email: str = "buyer@example.com"


class Settings(BaseModel):
    """Run configuration for the storefront scenarios."""

    base_url: str = "http://localhost:8000"
    timeouts: Timeouts = Field(default_factory=Timeouts)
    paths: Paths = Field(default_factory=Paths)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    billing: BillingDetails = Field(default_factory=BillingDetails)
    # dependent scenarios share one storefront; keep a single lane by default
    workers: int = Field(default=1, ge=1)
    retries: int = Field(default=0, ge=0)
    free_shipping_threshold: Decimal = Decimal("100")
    confirmation_phrases: List[str] = Field(default_factory=lambda: ["thank you", "order received", "faleminderit"])
    view_cart_labels: List[str] = Field(default_factory=lambda: ["View cart", "Shiko shportën"])
    payment_label_pattern: str = r"cash on delivery|\bcod\b"
    report_dir: str = "./reports"
    log_level: str = "info"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url must not be empty")
        return value.rstrip("/")

    def url(self, path: str) -> str:
        """Absolute URL for a storefront path."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"


ENV_OVERRIDES = {
    "BASE_URL": ("base_url",),
    "STOREFRONT_HEADLESS": ("browser", "headless"),
    "STOREFRONT_WORKERS": ("workers",),
    "STOREFRONT_RETRIES": ("retries",),
    "STOREFRONT_TIMEOUT_MS": ("timeouts", "scenario"),
    "STOREFRONT_LOG_LEVEL": ("log_level",),
}


def find_config_file(args_config: Optional[str] = None) -> Optional[str]:
    """Locate the YAML configuration file.

    An explicit path must exist. Otherwise the usual locations are searched
    and None is returned when nothing is found, leaving defaults in place.
    """
    if args_config:
        if os.path.isfile(args_config):
            return args_config
        raise FileNotFoundError(f"Specified config file not found: {args_config}")

    current_dir = os.getcwd()
    default_paths = [
        os.path.join(current_dir, "config", "config.yaml"),
        os.path.join(current_dir, "config.yaml"),
        "/app/config/config.yaml",
    ]
    for path in default_paths:
        if os.path.isfile(path):
            logging.debug(f"Auto-discovered config file: {path}")
            return path
    return None


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return data


def _set_path(data: Dict[str, Any], keys: tuple, value: Any) -> None:
    target = data
    for key in keys[:-1]:
        target = target.setdefault(key, {})
    target[keys[-1]] = value


def apply_env_overrides(data: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Environment variables take priority over the config file."""
    environ = os.environ if environ is None else environ
    for env_name, keys in ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        if keys == ("browser", "headless"):
            value: Any = raw.strip().lower() in ("1", "true", "yes", "on")
        else:
            value = raw
        _set_path(data, keys, value)
    return data


def load_settings(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """Build Settings from defaults, YAML file, environment and overrides,
    each layer taking priority over the previous one."""
    if environ is None:
        load_dotenv()

    path = find_config_file(config_path)
    data = load_yaml(path) if path else {}
    data = apply_env_overrides(data, environ)

    for dotted, value in (overrides or {}).items():
        if value is not None:
            _set_path(data, tuple(dotted.split(".")), value)

    settings = Settings.model_validate(data)
    logging.debug(f"Loaded settings from {path or 'defaults'}: base_url={settings.base_url}, workers={settings.workers}")
    return settings
