import json

from cyberrank_e2e.capture.console import ConsoleEntry
from cyberrank_e2e.capture.failure import capture_failure, capture_failure_once
from cyberrank_e2e.context import ScenarioContext
from cyberrank_e2e.core.errors import TimeoutExceeded


def test_capture_failure_writes_artifacts_and_attaches(arun, driver, fast_settings):
    ctx = ScenarioContext(name="Delete candidate user")
    error = TimeoutExceeded("Confirmation popup did not appear", timeout_ms=200, attempts=4)
    console = [
        ConsoleEntry("SEVERE", "Uncaught TypeError: grid is null"),
        ConsoleEntry("SEVERE", "Failed to load resource: 404 (Not Found)"),
    ]

    art = arun(
        capture_failure(
            driver,
            ctx,
            error=error,
            step="I click confirm on the popup",
            console=console,
            settings=fast_settings,
        )
    )

    assert art.screenshot.exists()
    assert art.screenshot.name.startswith("failed-Delete_candidate_user-")
    assert art.console_report == "Critical Browser Errors:\nSEVERE: Uncaught TypeError: grid is null"
    assert [a.media_type for a in ctx.attachments] == ["image/png", "text/plain"]
    assert ctx.attachments[1].name == "console-errors"

    meta = json.loads(art.sidecar.read_text(encoding="utf-8"))
    assert art.sidecar.name == art.screenshot.name + ".json"
    assert meta["scenario"] == "Delete candidate user"
    assert meta["step"] == "I click confirm on the popup"
    assert meta["error_type"] == "TimeoutExceeded"
    assert meta["page_url"] == "https://example.test/vas/login"
    assert meta["console"] == ["SEVERE: Uncaught TypeError: grid is null"]
    assert (meta["width"], meta["height"]) == (1, 1)

    lines = (fast_settings.SCREENSHOT_DIR / "failures.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["screenshot"] == art.screenshot.name


def test_capture_failure_without_console_errors(arun, driver, fast_settings):
    ctx = ScenarioContext(name="login")
    art = arun(capture_failure(driver, ctx, error=AssertionError("x"), settings=fast_settings))
    assert art.console_report == ""
    assert [a.media_type for a in ctx.attachments] == ["image/png"]


def test_screenshot_failure_does_not_mask_step_error(arun, driver, fast_settings):
    async def broken_screenshot():
        raise RuntimeError("Target closed")

    driver.screenshot = broken_screenshot
    ctx = ScenarioContext(name="login")
    art = arun(
        capture_failure(
            driver,
            ctx,
            error=AssertionError("x"),
            console=[ConsoleEntry("SEVERE", "boom")],
            settings=fast_settings,
        )
    )
    assert art.screenshot is None
    assert art.sidecar is None
    assert [a.name for a in ctx.attachments] == ["console-errors"]


def test_capture_failure_once_per_scenario(arun, driver, fast_settings):
    ctx = ScenarioContext(name="Delete candidate user")
    first = arun(capture_failure_once(driver, ctx, error=AssertionError("x"), step="setup", settings=fast_settings))
    again = arun(capture_failure_once(driver, ctx, error=AssertionError("y"), settings=fast_settings))

    assert first is not None and first.screenshot.exists()
    assert again is None
    assert ctx.failure_captured is True
    lines = (fast_settings.SCREENSHOT_DIR / "failures.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["step"] == "setup"

    ctx.clear()
    assert ctx.failure_captured is False
