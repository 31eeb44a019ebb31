DEFAULT_CONFIG = {
    "headless": True,
    "viewport": {"width": 1280, "height": 720},
    "language": "en-US",
    "base_url": None,
    "navigation_timeout": 60000,
}


def browser_config_from(settings) -> dict:
    """Driver configuration for a run's Settings."""
    return {
        "headless": settings.browser.headless,
        "viewport": dict(settings.browser.viewport),
        "language": settings.browser.language,
        "base_url": settings.base_url,
        "navigation_timeout": settings.timeouts.navigation,
    }
