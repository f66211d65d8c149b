import re
import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from cyberrank_e2e.utils.config import BrowserType, Settings, Timeouts
from cyberrank_e2e.utils.test_data import SuiteDataError, load_test_data, unique_email


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("TEST_USER_EMAIL", "TEST_USER_PASSWORD", "BASE_URL", "BROWSER_TYPE", "POLL_INTERVAL_MS"):
        monkeypatch.delenv(name, raising=False)


# ---------- Settings ----------


def test_env_overrides_defaults(monkeypatch):
    monkeypatch.setenv("BASE_URL", "https://staging.cyberrank.ai/")
    monkeypatch.setenv("BROWSER_TYPE", "firefox")
    s = Settings(_env_file=None)
    assert s.BASE_URL == "https://staging.cyberrank.ai"
    assert s.BROWSER_TYPE is BrowserType.firefox
    assert s.playwright_context_kwargs()["base_url"] == "https://staging.cyberrank.ai"


def test_relative_paths_are_absolutized():
    s = Settings(_env_file=None, SCREENSHOT_DIR="shots")
    assert s.SCREENSHOT_DIR == Path.cwd() / "shots"


def test_base_url_must_be_http():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, BASE_URL="cyberrank.ai")


def test_poll_interval_must_fit_shortest_tier():
    with pytest.raises(ValidationError, match="POLL_INTERVAL_MS"):
        Settings(_env_file=None, POLL_INTERVAL_MS=1000, TIMEOUT_VERY_SHORT=1000)


def test_proxy_credentials_only_with_both_parts():
    s = Settings(_env_file=None, PROXY_SERVER="http://proxy:3128", PROXY_USERNAME="u")
    assert s.playwright_launch_kwargs()["proxy"] == {"server": "http://proxy:3128"}
    s = Settings(_env_file=None, PROXY_SERVER="http://proxy:3128", PROXY_USERNAME="u", PROXY_PASSWORD="p")
    assert s.playwright_launch_kwargs()["proxy"]["password"] == "p"


def test_timeouts_from_settings(fast_settings):
    t = Timeouts.from_settings(fast_settings)
    assert (t.very_short, t.short, t.medium, t.extra_long) == (60, 120, 200, 300)


# ---------- Test data ----------


def write_yaml(path: Path, body: str) -> Path:
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


def test_load_test_data(fast_settings):
    write_yaml(
        fast_settings.TEST_DATA_FILE,
        """
        valid_user:
          email: qa@example.com
          password: from-file
        languages:
          indonesian: [Beranda, Tentang Kami]
        """,
    )
    data = load_test_data(settings=fast_settings)
    assert data.valid_user.email == "qa@example.com"
    assert data.nav_labels("Indonesian") == ["Beranda", "Tentang Kami"]
    assert data.email_domain == "gmail.com"
    with pytest.raises(KeyError, match="malaysian"):
        data.nav_labels("malaysian")


def test_env_credentials_override_file(fast_settings):
    write_yaml(
        fast_settings.TEST_DATA_FILE,
        """
        valid_user:
          email: qa@example.com
          password: from-file
        """,
    )
    s = fast_settings.model_copy(update={"TEST_USER_PASSWORD": "from-env"})
    data = load_test_data(settings=s)
    assert data.valid_user.email == "qa@example.com"
    assert data.valid_user.password == "from-env"


def test_env_credentials_without_file(fast_settings):
    s = fast_settings.model_copy(update={"TEST_USER_EMAIL": "ci@example.com", "TEST_USER_PASSWORD": "pw"})
    assert load_test_data(settings=s).valid_user.email == "ci@example.com"


@pytest.mark.parametrize(
    "body, match",
    [
        ("valid_user: [unclosed\n", "YAML parse error"),
        ("- just\n- a list\n", "must be a mapping"),
        ("valid_user:\n  email: not-an-email\n  password: x\n", "Invalid test data"),
        ("languages: {}\n", "Invalid test data"),
    ],
)
def test_bad_test_data(fast_settings, body, match):
    write_yaml(fast_settings.TEST_DATA_FILE, body)
    with pytest.raises(SuiteDataError, match=match):
        load_test_data(settings=fast_settings)


def test_unique_email():
    email = unique_email("testuser", "gmail.com")
    assert re.fullmatch(r"testuser\d{13,}@gmail\.com", email)
