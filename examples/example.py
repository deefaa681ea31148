import asyncio
import os
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from dotenv import load_dotenv
load_dotenv()

from formqa_agent.data import (FormDefinition, TestConfiguration, TestSession,
                               TestType)
from formqa_agent.executor import RunExecutor
from formqa_agent.utils import GetLog

FORM_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "tests", "data", "report-an-animal.json")


async def example():
    base_url = os.getenv("FORMQA_BASE_URL", "http://localhost:3009")
    form = FormDefinition.load(FORM_PATH)

    user_selection = {
        "form_walk_enabled": True,
        # condition ids to force both ways; empty exercises every condition
        "conditions": ["cond-dog"],
    }

    browser_config = {
        "viewport": {"width": 1280, "height": 720},
        "headless": False,
    }

    test_configurations = []

    # ---------- Form walk ----------
    if user_selection["form_walk_enabled"]:
        test_configurations.append(TestConfiguration(
            test_type=TestType.FORM_WALK,
            test_name="Form walk",
            browser_config=browser_config,
            test_specific_config={"field_data": {"TextField": ["Example answer"]}},
        ))

    # ---------- Condition branches ----------
    test_configurations.append(TestConfiguration(
        test_type=TestType.CONDITION_BRANCH,
        test_name="Condition branches",
        browser_config=browser_config,
        test_specific_config={"conditions": user_selection["conditions"]},
        timeout=600,
    ))

    session = TestSession(form_name=form.name, target_url=base_url)
    for test_config in test_configurations:
        session.add_test_configuration(test_config)

    try:
        executor = RunExecutor(form, base_url)
        session = await executor.execute_tests(session)
        print(session.get_summary_stats())
        print("HTML report: ", session.html_report_path)
    except Exception as e:
        print(f"Custom test execution failed: {e}")


async def main():
    """Main function - Run all examples"""
    GetLog.get_log(level="info")

    try:
        await example()

    except Exception as e:
        print(f"Example execution failed: {e}")


if __name__ == "__main__":
    # Run examples
    asyncio.run(main())
