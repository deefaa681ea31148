#!/usr/bin/env python3
import argparse
import asyncio
import sys
import traceback

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from formqa_agent.config import load_config
from formqa_agent.data import (FormDefinition, TestConfiguration, TestSession,
                               TestType)
from formqa_agent.exceptions import ConfigurationError
from formqa_agent.executor import RunExecutor
from formqa_agent.utils import GetLog


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
    except Exception as e:
        print(f"❌ Playwright check exception: {e}")
        return False


def build_test_configurations(cfg, mode="all"):
    tests = []
    tconf = cfg.test_config
    browser = cfg.browser_config.model_dump()

    if mode in ("walk", "all") and tconf.form_walk.enabled:
        tests.append(
            TestConfiguration(
                test_type=TestType.FORM_WALK,
                test_name="Form walk",
                browser_config=browser,
                test_specific_config={"field_data": tconf.form_walk.field_data},
                timeout=tconf.test_timeout,
            )
        )

    if mode in ("conditions", "all") and tconf.condition_branch.enabled:
        tests.append(
            TestConfiguration(
                test_type=TestType.CONDITION_BRANCH,
                test_name="Condition branches",
                browser_config=browser,
                test_specific_config={
                    "conditions": tconf.condition_branch.conditions,
                    "field_data": tconf.form_walk.field_data,
                },
                timeout=tconf.test_timeout,
            )
        )

    return tests


async def run_tests(cfg, form, mode):
    print(f"🏃 Environment: {cfg.test_environment}")
    test_configurations = build_test_configurations(cfg, mode)
    if not test_configurations:
        print("⚠️  No test types enabled, please check configuration file")
        sys.exit(1)
    print(f"📋 Enabled tests: {', '.join(t.test_name for t in test_configurations)}")

    print("🔍 Checking Playwright browsers...")
    if not await check_playwright_browsers_async():
        print("Please manually run: `playwright install chromium` to install browser binaries, then retry.", file=sys.stderr)
        sys.exit(1)

    GetLog.get_log(level=cfg.log.level)

    session = TestSession(form_name=form.name, target_url=cfg.target.base_url)
    for test_config in test_configurations:
        session.add_test_configuration(test_config)

    try:
        executor = RunExecutor(form, cfg.target.base_url, timeout_ms=cfg.timeout_ms)
        session = await executor.execute_tests(session, report_dir=cfg.report.output_dir)
        stats = session.get_summary_stats()
        print(f"🔢 Total sub-tests: {stats['total_sub_tests']}")
        print(f"✅ Passed: {stats['passed_sub_tests']}")
        print(f"❌ Not passed: {stats['total_sub_tests'] - stats['passed_sub_tests']}")

        if session.report_path:
            print("JSON report path: ", session.report_path)
        if session.html_report_path:
            print("HTML report path: ", session.html_report_path)
        else:
            print("HTML report generation failed")
        return stats["failed_tests"] == 0
    except Exception:
        print("Test execution failed, stack trace:", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)


def parse_args():
    parser = argparse.ArgumentParser(description="FormQA Agent: explore and verify a conditional form")
    parser.add_argument("--config", "-c", help="YAML configuration file path (optional, default auto-search config/config.yaml)")
    parser.add_argument("--form", "-f", help="Form definition JSON (overrides target.form_path)")
    parser.add_argument("--base-url", help="Form runner base URL (overrides target.base_url)")
    parser.add_argument("--mode", choices=["walk", "conditions", "all"], default="all", help="Which tests to run")
    return parser.parse_args()


def main():
    args = parse_args()

    try:
        cfg = load_config(args.config)
        if args.base_url:
            cfg.target.base_url = args.base_url
        form_path = args.form or cfg.target.form_path
        if not form_path:
            raise ConfigurationError("No form definition given: use --form or target.form_path")
        form = FormDefinition.load(form_path)
    except (FileNotFoundError, ConfigurationError, ValueError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)

    passed = asyncio.run(run_tests(cfg, form, args.mode))
    sys.exit(0 if passed else 2)


if __name__ == "__main__":
    main()
