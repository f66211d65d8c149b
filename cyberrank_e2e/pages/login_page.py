# cyberrank_e2e/pages/login_page.py
from __future__ import annotations

from typing import Dict

from cyberrank_e2e.pages.base_page import BasePage, candidates
from cyberrank_e2e.utils.timing import measure


class LoginPage(BasePage):
    PATH = "/vas/login"

    EMAIL_INPUT = candidates('input[type="text"]', 'input[type="email"]')
    PASSWORD_INPUT = candidates('input[type="password"]')
    LOGIN_BUTTON = candidates("#submit-button", "vaadin-button*=Login", "button*=Login")
    ERROR_MESSAGE = candidates('[role="alert"]', "alert", "vaadin-notification-card")
    SHOW_PASSWORD_BUTTON = candidates("button*=Show password")
    GOOGLE_BUTTON = candidates("button*=Sign in with Google")
    MICROSOFT_BUTTON = candidates("button*=Sign in with Microsoft")
    FORGOT_PASSWORD_LINK = candidates("vaadin-button*=Forgot Password", "a*=Forgot Password")
    REGISTER_LINK = candidates("vaadin-button*=Register", "a*=Register")
    HEADING = candidates("h2", "h1")

    @property
    def buttons(self) -> Dict[str, tuple]:
        """Buttons addressable by their visible name in feature files."""
        return {
            "login": self.LOGIN_BUTTON,
            "forgot password": self.FORGOT_PASSWORD_LINK,
            "register": self.REGISTER_LINK,
            "sign in with google": self.GOOGLE_BUTTON,
            "sign in with microsoft": self.MICROSOFT_BUTTON,
            "show password": self.SHOW_PASSWORD_BUTTON,
        }

    async def enter_email(self, email: str) -> None:
        await self.set_value(self.EMAIL_INPUT, email)

    async def enter_password(self, password: str) -> None:
        await self.set_value(self.PASSWORD_INPUT, password)

    @measure("login", level="INFO")
    async def login(self, email: str, password: str) -> None:
        await self.enter_email(email)
        await self.enter_password(password)
        await self.click(self.LOGIN_BUTTON)

    async def click_button(self, name: str) -> None:
        try:
            cands = self.buttons[name.strip().lower()]
        except KeyError:
            raise KeyError(f"unknown login page button {name!r}; known: {sorted(self.buttons)}") from None
        await self.click(cands)

    async def get_error_message(self) -> str:
        return await self.get_text(self.ERROR_MESSAGE, self.timeout.medium_long)

    async def get_heading(self) -> str:
        return await self.get_text(self.HEADING, self.timeout.short)

    async def is_login_form_displayed(self) -> bool:
        return (
            await self.is_displayed(self.EMAIL_INPUT)
            and await self.is_displayed(self.PASSWORD_INPUT)
            and await self.is_displayed(self.LOGIN_BUTTON)
        )

    async def is_on_login_page(self) -> bool:
        return self.PATH in await self.current_url() and await self.is_login_form_displayed()
