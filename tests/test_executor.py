import asyncio
import json
import os
import uuid

import pytest
import requests

from fakes import FakePage
from storefront_qa.data.test_structures import TestStatus as Status
from storefront_qa.exceptions import NotFoundError, PreconditionError
from storefront_qa.executor import ScenarioExecutor
from storefront_qa.scenarios import ScenarioContext, ScenarioRegistry


class FakeSession:
    def __init__(self, page):
        self.session_id = str(uuid.uuid4())
        self.page = page

    def get_page(self):
        return self.page


class FakeSessionManager:
    def __init__(self):
        self.created = []
        self.closed = []
        self.configs = []

    async def create_session(self, browser_config=None):
        self.configs.append(browser_config)
        session = FakeSession(FakePage(url="http://shop.test/"))
        self.created.append(session)
        return session

    async def close_session(self, session_id):
        self.closed.append(session_id)

    async def close_all_sessions(self):
        pass


class FakeFlows:
    def __init__(self, log):
        self.log = log

    async def clear_cart(self):
        self.log.append("clear")
        return 0


@pytest.fixture
def calls():
    return []


@pytest.fixture
def make_executor(settings, tmp_path, calls):
    def factory(registry, **settings_update):
        run_settings = settings.model_copy(update=settings_update)
        manager = FakeSessionManager()
        executor = ScenarioExecutor(
            run_settings,
            registry,
            session_manager=manager,
            context_factory=lambda page, s: ScenarioContext(page=page, settings=s, reader=None, flows=FakeFlows(calls)),
            report_dir=str(tmp_path / "report"),
        )
        return executor, manager

    return factory


def catalog(calls):
    scenarios = ScenarioRegistry()
    attempts = {"flaky": 0}

    @scenarios.scenario("Always passes")
    async def passes(ctx):
        calls.append("passes")

    @scenarios.scenario("Missing element")
    async def missing(ctx):
        raise NotFoundError("Cart container never became visible.", url=ctx.page.url, observed="<empty>")

    @scenarios.scenario("Passes on second attempt")
    async def flaky(ctx):
        attempts["flaky"] += 1
        assert attempts["flaky"] > 1, "first attempt fails"

    @scenarios.scenario("Hangs")
    async def hangs(ctx):
        await asyncio.sleep(5)

    return scenarios


async def test_statuses_and_isolation(make_executor, calls):
    executor, manager = make_executor(catalog(calls))

    run = await executor.run(["passes", "missing", "flaky"], warm_up=False)

    statuses = {name: r.status for name, r in run.results.items()}
    assert statuses == {"passes": Status.PASSED, "missing": Status.FAILED, "flaky": Status.FAILED}
    assert calls == ["clear", "passes", "clear", "clear"]
    assert len(manager.created) == 3
    assert sorted(manager.closed) == sorted(s.session_id for s in manager.created)
    assert manager.configs[0]["base_url"] == "http://shop.test"
    assert not run.success


async def test_failure_diagnostics(make_executor, calls):
    executor, _ = make_executor(catalog(calls))

    run = await executor.run(["missing"], warm_up=False)

    result = run.results["missing"]
    diagnostics = result.diagnostics
    assert diagnostics.error_type == "NotFoundError"
    assert diagnostics.message == "Cart container never became visible."
    assert diagnostics.url == "http://shop.test/"
    assert diagnostics.observed == "<empty>"
    assert "Fake page" in diagnostics.page_excerpt
    assert os.path.isfile(diagnostics.screenshot_path)
    assert result.error_message.startswith("NotFoundError")


async def test_retries_rerun_failed_scenarios(make_executor, calls):
    executor, manager = make_executor(catalog(calls), retries=1)

    run = await executor.run(["flaky"], warm_up=False)

    result = run.results["flaky"]
    assert result.status == Status.PASSED
    assert result.attempts == 2
    assert result.diagnostics is None
    assert len(manager.created) == 2


async def test_scenario_timeout(make_executor, calls, settings):
    timeouts = settings.timeouts.model_copy(update={"scenario": 50})
    executor, _ = make_executor(catalog(calls), timeouts=timeouts)

    run = await executor.run(["hangs"], warm_up=False)

    result = run.results["hangs"]
    assert result.status == Status.FAILED
    assert result.diagnostics.error_type == "WaitTimeoutError"
    assert "50 ms" in result.diagnostics.message


async def test_reports_are_written(make_executor, calls, tmp_path):
    executor, _ = make_executor(catalog(calls))

    run = await executor.run(["passes", "missing"], warm_up=False)

    with open(run.report_path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["summary"]["total"] == 2
    assert data["summary"]["failed"] == 1
    assert [issue["scenario"] for issue in data["issues"]] == ["Missing element"]
    assert os.path.dirname(run.html_report_path) == str(tmp_path / "report")


class Response:
    def __init__(self, status_code):
        self.status_code = status_code
        self.ok = status_code < 400


async def test_warm_up(make_executor, calls, monkeypatch):
    executor, _ = make_executor(catalog(calls))
    monkeypatch.setattr(requests, "get", lambda url, timeout: Response(200))
    assert await executor.warm_up() == 200


async def test_failed_warm_up_aborts_run(make_executor, calls, monkeypatch):
    executor, manager = make_executor(catalog(calls))
    monkeypatch.setattr(requests, "get", lambda url, timeout: Response(503))

    with pytest.raises(PreconditionError, match="HTTP 503"):
        await executor.run()
    assert manager.created == []


async def test_unreachable_storefront(make_executor, calls, monkeypatch):
    executor, _ = make_executor(catalog(calls))

    def refuse(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "get", refuse)
    with pytest.raises(PreconditionError, match="connection refused"):
        await executor.warm_up()
