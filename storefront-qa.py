import argparse
import asyncio
import sys
import traceback

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright
from pydantic import ValidationError

from storefront_qa.config import load_settings
from storefront_qa.exceptions import PreconditionError
from storefront_qa.executor import ScenarioExecutor
from storefront_qa.scenarios import registry
from storefront_qa.utils import GetLog


async def check_playwright_browsers_async():
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            await browser.close()
        print("✅ Playwright browsers available")
        return True
    except PlaywrightError as e:
        print(f"⚠️ Playwright browsers unavailable: {e}")
        return False


async def run_scenarios(settings, names):
    print("🔍 Checking Playwright browsers...")
    if not await check_playwright_browsers_async():
        print("Please manually run: `playwright install chromium` to install browser binaries, then retry.", file=sys.stderr)
        return 1

    print(f"🛒 Storefront: {settings.base_url}")
    print(f"⚙️ Workers: {settings.workers}, retries: {settings.retries}")

    executor = ScenarioExecutor(settings, registry)
    try:
        run_session = await executor.run(names)
    except PreconditionError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    except Exception:
        print("Scenario run failed, stack trace:", file=sys.stderr)
        traceback.print_exc()
        return 1

    stats = run_session.get_summary_stats()
    print(f"🔢 Total scenarios: {stats['total']}")
    print(f"✅ Passed: {stats['passed']}")
    print(f"❌ Failed: {stats['failed']}")
    if stats["cancelled"]:
        print(f"🚫 Cancelled: {stats['cancelled']}")
    print("JSON report path: ", run_session.report_path)
    print("HTML report path: ", run_session.html_report_path)
    return 0 if run_session.success else 1


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Storefront acceptance scenarios for classic and blocks rendering")
    parser.add_argument("--config", "-c", help="YAML configuration file path (optional, default auto-search config/config.yaml)")
    parser.add_argument("--base-url", help="Storefront base URL, overrides BASE_URL")
    parser.add_argument("--scenario", "-s", action="append", help="Scenario name to run, repeatable (default: all)")
    parser.add_argument("--workers", type=int, help="Number of scenarios run at once")
    parser.add_argument("--retries", type=int, help="Re-runs of a failed scenario")
    parser.add_argument("--timeout", type=int, help="Per-scenario timeout in milliseconds")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--list", action="store_true", help="List scenarios and exit")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    if args.list:
        for scenario in registry.all():
            print(f"{scenario.name:40} {scenario.title}")
        return 0

    overrides = {
        "base_url": args.base_url,
        "workers": args.workers,
        "retries": args.retries,
        "timeouts.scenario": args.timeout,
        "browser.headless": False if args.headed else None,
    }
    try:
        settings = load_settings(args.config, overrides=overrides)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    try:
        registry.select(args.scenario)
    except KeyError as e:
        print(f"[ERROR] {e.args[0]}", file=sys.stderr)
        return 1

    GetLog.get_log(level=settings.log_level)
    return asyncio.run(run_scenarios(settings, args.scenario))


if __name__ == "__main__":
    sys.exit(main())
