# cyberrank_e2e/pages/registration_page.py
from __future__ import annotations

from cyberrank_e2e.pages.base_page import BasePage, candidates
from cyberrank_e2e.utils.timing import now_ms


class RegistrationPage(BasePage):
    PATH = "/register"

    EMAIL_INPUT = candidates('input[type="email"]', 'input[type="text"]')
    PASSWORD_INPUTS = candidates('input[type="password"]')
    TERMS_CHECKBOX = candidates("vaadin-checkbox", 'input[type="checkbox"]')
    SUBMIT_BUTTON = candidates("vaadin-button*=Register", "button*=Register")
    SUCCESS_POPUP = candidates("vaadin-notification-container vaadin-notification-card", "vaadin-notification-card")
    SUCCESS_POPUP_TITLE = candidates("vaadin-notification-card div")
    ERROR_MESSAGE = candidates('[role="alert"]', ".error-message")

    async def enter_email(self, email: str) -> None:
        await self.set_value(self.EMAIL_INPUT, email)

    async def enter_password(self, password: str) -> None:
        handle = await self.find_nth(self.PASSWORD_INPUTS, 0)
        await self.fill(handle, password, description="set password")

    async def enter_confirm_password(self, password: str) -> None:
        handle = await self.find_nth(self.PASSWORD_INPUTS, 1)
        await self.fill(handle, password, description="set confirm password")

    async def accept_terms(self) -> None:
        await self.click(self.TERMS_CHECKBOX)

    async def submit(self) -> None:
        await self.click(self.SUBMIT_BUTTON)

    async def register(self, email: str, password: str, accept_terms: bool = True) -> None:
        started = now_ms()
        await self.enter_email(email)
        await self.enter_password(password)
        await self.enter_confirm_password(password)
        if accept_terms:
            await self.accept_terms()
        await self.submit()
        self.log.info(f"Registration submitted for {email} in {now_ms() - started} ms")

    async def wait_for_success_popup(self) -> None:
        # account creation can take minutes on the live site
        await self.wait_for_element(self.SUCCESS_POPUP, self.timeout.extra_long)

    async def get_success_title(self) -> str:
        return await self.get_text(self.SUCCESS_POPUP_TITLE)

    async def get_success_popup_text(self) -> str:
        return await self.get_text(self.SUCCESS_POPUP)

    async def get_error_message(self) -> str:
        return await self.get_text(self.ERROR_MESSAGE)

    async def is_registration_form_displayed(self) -> bool:
        return await self.is_displayed(self.EMAIL_INPUT) and await self.is_displayed(self.SUBMIT_BUTTON)
