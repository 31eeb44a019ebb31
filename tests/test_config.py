from decimal import Decimal

import pytest
from pydantic import ValidationError

from storefront_qa.config import Settings, apply_env_overrides, find_config_file, load_settings


def test_defaults():
    settings = Settings()
    assert settings.workers == 1
    assert settings.retries == 0
    assert settings.free_shipping_threshold == Decimal("100")
    assert settings.browser.headless is True
    assert settings.timeouts.seconds("scenario") == 90


def test_base_url_is_normalized():
    settings = Settings(base_url=" http://shop.test/ ")
    assert settings.base_url == "http://shop.test"
    assert settings.url("/cart/") == "http://shop.test/cart/"
    assert settings.url("?add-to-cart=5") == "http://shop.test/?add-to-cart=5"
    assert settings.url("https://elsewhere.test/x") == "https://elsewhere.test/x"


@pytest.mark.parametrize("field, value", [("workers", 0), ("base_url", "  ")])
def test_invalid_settings_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_env_overrides():
    data = apply_env_overrides(
        {"browser": {"language": "sq"}},
        {
            "BASE_URL": "http://env.test",
            "STOREFRONT_HEADLESS": "false",
            "STOREFRONT_WORKERS": "3",
            "STOREFRONT_TIMEOUT_MS": "120000",
            "STOREFRONT_RETRIES": "",
        },
    )
    settings = Settings.model_validate(data)
    assert settings.base_url == "http://env.test"
    assert settings.browser.headless is False
    assert settings.browser.language == "sq"
    assert settings.workers == 3
    assert settings.timeouts.scenario == 120000
    assert settings.retries == 0


def test_load_settings_layers(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = tmp_path / "shop.yaml"
    config.write_text("base_url: http://yaml.test\nworkers: 2\ntimeouts:\n  element: 5000\n", encoding="utf-8")

    settings = load_settings(
        str(config),
        overrides={"workers": 4, "timeouts.scenario": 1000, "retries": None},
        environ={"BASE_URL": "http://env.test/"},
    )
    assert settings.base_url == "http://env.test"
    assert settings.workers == 4
    assert settings.timeouts.element == 5000
    assert settings.timeouts.scenario == 1000
    assert settings.retries == 0


def test_load_settings_discovers_config_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "config.yaml").write_text("free_shipping_threshold: 50\n", encoding="utf-8")
    assert load_settings(environ={}).free_shipping_threshold == Decimal("50")


def test_load_settings_without_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert find_config_file() is None
    assert load_settings(environ={}).base_url == Settings().base_url


def test_explicit_config_must_exist(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_config_file(str(tmp_path / "missing.yaml"))


def test_config_must_be_a_mapping(tmp_path):
    config = tmp_path / "list.yaml"
    config.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(str(config), environ={})
