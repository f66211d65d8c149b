"""
Browser-suite fixtures and hooks.

One BrowserSession per test session; every scenario starts from a clean
browser state and logs in first when tagged @authenticated. A failing
scenario, setup login included, leaves one screenshot plus the severe
console errors behind.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from cyberrank_e2e.capture.failure import capture_failure_once
from cyberrank_e2e.context import ScenarioContext
from cyberrank_e2e.pages import (
    BasePage,
    DashboardPage,
    ForgotPasswordPage,
    LanguagePage,
    LoginPage,
    RegistrationPage,
    ReportSettingsPage,
    TeamPage,
    UserSettingsPage,
)
from cyberrank_e2e.session import BrowserSession
from cyberrank_e2e.utils.config import get_settings
from cyberrank_e2e.utils.logger import bind, get_logger, log_with_context, unbind
from cyberrank_e2e.utils.test_data import get_test_data

from tests.e2e.step_defs.common_steps import *  # noqa: F401,F403
from tests.e2e.step_defs.common_steps import login_as_valid_user
from tests.e2e.step_defs.dashboard_steps import *  # noqa: F401,F403
from tests.e2e.step_defs.forgot_password_steps import *  # noqa: F401,F403
from tests.e2e.step_defs.language_steps import *  # noqa: F401,F403
from tests.e2e.step_defs.login_steps import *  # noqa: F401,F403
from tests.e2e.step_defs.profile_steps import *  # noqa: F401,F403
from tests.e2e.step_defs.registration_steps import *  # noqa: F401,F403
from tests.e2e.step_defs.report_steps import *  # noqa: F401,F403
from tests.e2e.step_defs.team_steps import *  # noqa: F401,F403

log = get_logger("e2e")

_HERE = Path(__file__).resolve().parent
SETUP_LOGIN_STEP = "Given I am logged into CyberRank (setup)"


def pytest_collection_modifyitems(config, items):
    if get_settings().RUN_E2E:
        return
    skip = pytest.mark.skip(reason="browser scenarios need RUN_E2E=true")
    for item in items:
        if _HERE in Path(str(item.fspath)).resolve().parents:
            item.add_marker(skip)


_PAGE_TYPES = {
    "base": BasePage,
    "login": LoginPage,
    "registration": RegistrationPage,
    "forgot_password": ForgotPasswordPage,
    "dashboard": DashboardPage,
    "team": TeamPage,
    "language": LanguagePage,
    "user_settings": UserSettingsPage,
    "report_settings": ReportSettingsPage,
}


@dataclass
class Pages:
    """One instance of every page object, all driving the session's page."""

    base: BasePage
    login: LoginPage
    registration: RegistrationPage
    forgot_password: ForgotPasswordPage
    dashboard: DashboardPage
    team: TeamPage
    language: LanguagePage
    user_settings: UserSettingsPage
    report_settings: ReportSettingsPage

    @classmethod
    def for_driver(cls, driver, settings) -> "Pages":
        return cls(**{name: page_cls(driver, settings) for name, page_cls in _PAGE_TYPES.items()})


@pytest.fixture(scope="session")
def browser_session():
    session = BrowserSession(get_settings())
    session.start()
    log.info("Starting test suite execution...")
    yield session
    session.close()
    log.info("Test suite execution completed.")


@pytest.fixture
def run(browser_session):
    """Run a page-object coroutine on the session's loop and return its result."""
    return browser_session.run


@pytest.fixture(scope="session")
def suite_data():
    return get_test_data()


@pytest.fixture
def pages(browser_session) -> Pages:
    return Pages.for_driver(browser_session.driver, browser_session.settings)


def _record_failure(node, session, ctx, error, step):
    artifacts = session.run(
        capture_failure_once(
            session.driver,
            ctx,
            error=error,
            step=step,
            console=session.console.entries,
            settings=session.settings,
        )
    )
    if artifacts is None:
        return
    if artifacts.screenshot is not None:
        node.user_properties.append(("screenshot", str(artifacts.screenshot)))
    if artifacts.console_report:
        node.user_properties.append(("console_errors", artifacts.console_report))


@pytest.fixture(autouse=True)
def scenario_ctx(request, browser_session, run, pages, suite_data):
    ctx = ScenarioContext(name=request.node.name)
    bind(scenario=ctx.name)
    log.info(f"Starting scenario: {ctx.name}")
    run(browser_session.reset())
    if request.node.get_closest_marker("authenticated"):
        try:
            login_as_valid_user(run, pages, suite_data, ctx)
        except Exception as exc:
            _record_failure(request.node, browser_session, ctx, exc, SETUP_LOGIN_STEP)
            log_with_context(log, step=SETUP_LOGIN_STEP).error(
                f"Scenario setup failed: {SETUP_LOGIN_STEP} ({exc.__class__.__name__})"
            )
            unbind("scenario")
            raise
    yield ctx
    log.info(f"Completed scenario: {ctx.name} in {ctx.elapsed_ms()} ms")
    ctx.clear()
    unbind("scenario")


def pytest_bdd_step_error(request, feature, scenario, step, step_func, step_func_args, exception):
    session = request.getfixturevalue("browser_session")
    ctx = request.getfixturevalue("scenario_ctx")
    _record_failure(request.node, session, ctx, exception, step.name)
    log_with_context(log, step=step.name).error(
        f"Step failed: {step.keyword} {step.name} ({exception.__class__.__name__})"
    )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    # failures raised outside a step (hooks, fixtures used mid-scenario)
    outcome = yield
    report = outcome.get_result()
    if report.when != "call" or not report.failed or call.excinfo is None:
        return
    ctx = item.funcargs.get("scenario_ctx")
    session = item.funcargs.get("browser_session")
    if ctx is None or session is None or ctx.failure_captured:
        return
    _record_failure(item, session, ctx, call.excinfo.value, None)
