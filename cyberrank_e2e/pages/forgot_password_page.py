# cyberrank_e2e/pages/forgot_password_page.py
from __future__ import annotations

from cyberrank_e2e.pages.base_page import BasePage, candidates

# The reset flow has lived under several paths.
FORGOT_PASSWORD_URL_MARKERS = ("/forgot", "/reset", "/password")


class ForgotPasswordPage(BasePage):
    PATH = "/forgot-password"

    EMAIL_INPUT = candidates('input[type="email"]', 'input[type="text"]')
    SEND_RESET_BUTTON = candidates("vaadin-button*=Send Reset Password Link", "button*=Send Reset Password Link")
    SUCCESS_POPUP = candidates('[role="alert"]', "vaadin-notification-card")
    BACK_TO_LOGIN_LINK = candidates("vaadin-button*=Back to Login", "a*=Back to Login")
    ERROR_MESSAGE = candidates('[role="alert"]', ".error-message")

    async def reset_password(self, email: str) -> None:
        await self.enter_email(email)
        await self.click_send_reset()

    async def enter_email(self, email: str) -> None:
        await self.set_value(self.EMAIL_INPUT, email)

    async def click_send_reset(self) -> None:
        await self.click(self.SEND_RESET_BUTTON)

    async def wait_for_success_popup(self) -> None:
        await self.wait_for_element(self.SUCCESS_POPUP, self.timeout.long)

    async def get_success_message(self) -> str:
        return await self.get_text(self.SUCCESS_POPUP, self.timeout.long)

    async def get_error_message(self) -> str:
        return await self.get_text(self.ERROR_MESSAGE)

    async def is_forgot_password_form_displayed(self) -> bool:
        return await self.is_displayed(self.EMAIL_INPUT) and await self.is_displayed(self.SEND_RESET_BUTTON)

    async def is_on_forgot_password_page(self) -> bool:
        url = await self.current_url()
        return any(marker in url for marker in FORGOT_PASSWORD_URL_MARKERS)

    async def go_back_to_login(self) -> None:
        await self.click(self.BACK_TO_LOGIN_LINK)
