import os

import pytest

from fakes import FakePage
from storefront_qa.config import Settings, Timeouts


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        '--url',
        action='store',
        default=None,
        help='Storefront base URL for the end-to-end scenarios (overrides BASE_URL)',
    )


@pytest.fixture
def storefront_url(request: pytest.FixtureRequest) -> str:
    # Priority: CLI --url > env BASE_URL; no default, live runs are opt-in
    url = request.config.getoption('--url') or os.getenv('BASE_URL')
    if not url:
        pytest.skip('no storefront URL given (--url or BASE_URL)')
    return url


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with bounds short enough for in-memory pages."""
    timeouts = Timeouts(
        navigation=1000,
        container=50,
        spinner=20,
        element=20,
        removal=50,
        shipping_ui=50,
        confirmation=50,
        scenario=2000,
        poll_interval=0,
        total_retry_interval=0,
        cart_rows_attempts=2,
        assert_rows_attempts=2,
        total_attempts=2,
        checkout_total_attempts=1,
    )
    return Settings(base_url='http://shop.test/', timeouts=timeouts, report_dir=str(tmp_path / 'reports'))


@pytest.fixture
def page() -> FakePage:
    return FakePage(url='http://shop.test/')
