import asyncio
import logging
import os
import re
from datetime import datetime
from typing import Callable, Iterable, List, Optional

import requests
from html2text import html2text
from playwright.async_api import Page

from storefront_qa.browser.config import browser_config_from
from storefront_qa.browser.session import BrowserSessionManager
from storefront_qa.config import Settings
from storefront_qa.data import FailureDiagnostics, RunSession, ScenarioResult, TestStatus
from storefront_qa.exceptions import PreconditionError, StorefrontError, WaitTimeoutError
from storefront_qa.executor.result_aggregator import ResultAggregator
from storefront_qa.scenarios.registry import Scenario, ScenarioContext, ScenarioRegistry
from storefront_qa.utils.log_icon import icon

PAGE_EXCERPT_CHARS = 2000

ContextFactory = Callable[[Page, Settings], ScenarioContext]


def report_dir_for(settings: Settings) -> str:
    timestamp = os.getenv("STOREFRONT_QA_TIMESTAMP") or datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    return os.path.join(settings.report_dir, f"test_{timestamp}")


class ScenarioExecutor:
    """Runs scenarios, each in its own browser session on an emptied cart."""

    def __init__(
        self,
        settings: Settings,
        registry: ScenarioRegistry,
        session_manager: Optional[BrowserSessionManager] = None,
        result_aggregator: Optional[ResultAggregator] = None,
        context_factory: ContextFactory = ScenarioContext.for_page,
        report_dir: Optional[str] = None,
    ):
        self.settings = settings
        self.registry = registry
        self.session_manager = session_manager or BrowserSessionManager()
        self.result_aggregator = result_aggregator or ResultAggregator()
        self.context_factory = context_factory
        self.report_dir = report_dir or report_dir_for(settings)

    async def warm_up(self, timeout: float = 30.0) -> int:
        """GET the base URL once; the run aborts unless it answers OK."""
        loop = asyncio.get_running_loop()
        url = self.settings.base_url

        def _sync_get():
            return requests.get(url, timeout=timeout)

        try:
            response = await loop.run_in_executor(None, _sync_get)
        except requests.RequestException as e:
            raise PreconditionError(f"Storefront warm-up request failed: {e}", url=url) from e
        if not response.ok:
            raise PreconditionError(f"Storefront warm-up returned HTTP {response.status_code}", url=url)
        logging.info(f"Storefront at {url} answered HTTP {response.status_code}")
        return response.status_code

    async def run(self, names: Optional[Iterable[str]] = None, warm_up: bool = True) -> RunSession:
        """Run the selected scenarios and write the JSON and HTML reports.

        Raises:
            PreconditionError: if the warm-up request fails.
        """
        scenarios = self.registry.select(names)
        run_session = RunSession(base_url=self.settings.base_url)
        run_session.start_session()
        logging.info(f"Running {len(scenarios)} scenario(s) against {self.settings.base_url} with {self.settings.workers} worker(s)")

        try:
            if warm_up:
                await self.warm_up()
            await self._execute(run_session, scenarios)
            run_session.complete_session()
            self._write_reports(run_session)

        except asyncio.CancelledError:
            logging.warning("Scenario run cancelled, generating partial report.")
            run_session.complete_session()
            self._write_reports(run_session)
            raise

        finally:
            if run_session.end_time is None:
                run_session.complete_session()
            await self.session_manager.close_all_sessions()

        logging.info(f"{icon['report']} Scenario run completed. Report: {run_session.html_report_path}")
        return run_session

    def _write_reports(self, run_session: RunSession):
        run_session.report_path = self.result_aggregator.generate_json_report(run_session, self.report_dir)
        run_session.html_report_path = self.result_aggregator.generate_html_report(run_session, self.report_dir)

    async def _execute(self, run_session: RunSession, scenarios: List[Scenario]):
        semaphore = asyncio.Semaphore(self.settings.workers)
        tasks = [asyncio.create_task(self._run_scenario(scenario, semaphore)) for scenario in scenarios]

        try:
            results = await asyncio.gather(*tasks, return_exceptions=True)
        except asyncio.CancelledError:
            results = []
            for task in tasks:
                if task.done() and not task.cancelled():
                    results.append(task.exception() or task.result())
                else:
                    task.cancel()
                    results.append(asyncio.CancelledError())
            cancelled = True
        else:
            cancelled = False

        for scenario, result in zip(scenarios, results):
            if isinstance(result, BaseException):
                status = TestStatus.CANCELLED if isinstance(result, asyncio.CancelledError) else TestStatus.FAILED
                failed = ScenarioResult(scenario_name=scenario.name, title=scenario.title)
                failed.complete(status, str(result) or type(result).__name__)
                run_session.update_result(failed)
            else:
                run_session.update_result(result)

        if cancelled:
            raise asyncio.CancelledError()

    async def _run_scenario(self, scenario: Scenario, semaphore: asyncio.Semaphore) -> ScenarioResult:
        async with semaphore:
            result = ScenarioResult(scenario_name=scenario.name, title=scenario.title)
            result.start()
            logging.info(f"{icon['running']} Starting scenario: {scenario.title}")

            max_attempts = self.settings.retries + 1
            try:
                while True:
                    result.attempts += 1
                    diagnostics = await self._attempt(scenario, result.attempts)
                    if diagnostics is None:
                        result.diagnostics = None
                        result.complete(TestStatus.PASSED)
                        logging.info(f"{icon['success']} Scenario passed: {scenario.title}")
                        return result

                    result.diagnostics = diagnostics
                    if result.attempts >= max_attempts:
                        result.complete(TestStatus.FAILED, f"{diagnostics.error_type}: {diagnostics.message}")
                        logging.error(f"{icon['failure']} Scenario failed: {scenario.title} - {diagnostics.message}")
                        return result
                    logging.warning(
                        f"{icon['warning']} Scenario {scenario.title} failed on attempt {result.attempts}/{max_attempts}, retrying"
                    )

            except asyncio.CancelledError:
                logging.warning(f"{icon['cancelled']} Scenario cancelled: {scenario.title}")
                result.complete(TestStatus.CANCELLED, "Scenario was cancelled")
                return result

    async def _attempt(self, scenario: Scenario, attempt: int) -> Optional[FailureDiagnostics]:
        """One isolated attempt. Returns None on success, else what went wrong."""
        session = await self.session_manager.create_session(browser_config_from(self.settings))
        page = session.get_page()
        timeout = self.settings.timeouts.seconds("scenario")
        try:
            ctx = self.context_factory(page, self.settings)
            try:
                await asyncio.wait_for(self._clear_then_run(scenario, ctx), timeout=timeout)
            except StorefrontError:
                raise
            except asyncio.TimeoutError as e:
                raise WaitTimeoutError(
                    f"Scenario exceeded {self.settings.timeouts.scenario} ms", url=page.url
                ) from e
            return None

        except Exception as e:
            return await self.collect_diagnostics(page, e, f"{scenario.name}_{attempt}")

        finally:
            await self.session_manager.close_session(session.session_id)

    async def _clear_then_run(self, scenario: Scenario, ctx: ScenarioContext):
        await ctx.flows.clear_cart()
        await scenario.run(ctx)

    async def collect_diagnostics(self, page: Page, error: BaseException, label: str) -> FailureDiagnostics:
        """Error details plus a text excerpt and a screenshot of the page."""
        diagnostics = FailureDiagnostics(
            error_type=type(error).__name__,
            message=getattr(error, "message", None) or str(error) or type(error).__name__,
            url=getattr(error, "url", None) or page.url,
            observed=getattr(error, "observed", None),
        )
        try:
            diagnostics.page_excerpt = html2text(await page.content())[:PAGE_EXCERPT_CHARS]
        except Exception as e:
            logging.warning(f"Could not read page content for {label}: {e}")

        try:
            screenshot_dir = os.path.join(self.report_dir, "screenshots")
            os.makedirs(screenshot_dir, exist_ok=True)
            path = os.path.join(screenshot_dir, re.sub(r"[^\w.-]", "_", label) + ".png")
            await page.screenshot(path=path, full_page=True)
            diagnostics.screenshot_path = os.path.abspath(path)
        except Exception as e:
            logging.warning(f"Could not take screenshot for {label}: {e}")

        return diagnostics
