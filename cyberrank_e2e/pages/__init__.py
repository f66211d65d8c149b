# cyberrank_e2e/pages/__init__.py
"""
Page objects for the CyberRank web app.
"""

from .base_page import BasePage
from .dashboard_page import DashboardPage
from .forgot_password_page import ForgotPasswordPage
from .language_page import LanguagePage
from .login_page import LoginPage
from .registration_page import RegistrationPage
from .report_settings_page import ReportSettingsPage
from .team_page import TeamMember, TeamPage
from .user_settings_page import UserSettingsPage

ALL_PAGES = (
    LoginPage,
    RegistrationPage,
    ForgotPasswordPage,
    DashboardPage,
    TeamPage,
    LanguagePage,
    UserSettingsPage,
    ReportSettingsPage,
)

__all__ = [
    "ALL_PAGES",
    "BasePage",
    "DashboardPage",
    "ForgotPasswordPage",
    "LanguagePage",
    "LoginPage",
    "RegistrationPage",
    "ReportSettingsPage",
    "TeamMember",
    "TeamPage",
    "UserSettingsPage",
]
