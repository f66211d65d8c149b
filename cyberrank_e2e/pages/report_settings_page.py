# cyberrank_e2e/pages/report_settings_page.py
from __future__ import annotations

from typing import Optional

from cyberrank_e2e.pages.base_page import BasePage, candidates
from cyberrank_e2e.selectors.candidate import SelectorCandidate
from cyberrank_e2e.selectors.filters import first, snapshot_all
from cyberrank_e2e.utils.timing import now_ms

# h2 headings on the dashboard that are section titles, not reports
NON_REPORT_HEADINGS = ("Dashboard", "Recent Ratings", "Cyber Rank", "Privacy", "Security", "Compliance", "Data Breach")


class ReportSettingsPage(BasePage):
    PATH = "/vas/dashboard"

    SETTINGS_ICON = candidates("vaadin-button.dashboard-action-button2=Settings", "vaadin-button*=Settings")
    SETTINGS_DIALOG = candidates('[role="dialog"]', "vaadin-dialog-overlay")
    INPUTS = candidates('[role="dialog"] input', "input")
    DESCRIPTION_FIELD = candidates("textarea", 'input[placeholder*="Description"]', 'input[name*="description"]')
    SAVE_BUTTON = candidates("vaadin-button=Save", "button=Save")
    CANCEL_BUTTON = candidates("vaadin-button=Cancel", "button=Cancel")
    SUCCESS_MESSAGE = candidates('[role="alert"]', "vaadin-notification-card", ".notification", '[class*="success"]')
    MAIN_HEADING = candidates("h1")
    REPORT_HEADINGS = SelectorCandidate.css("h2")

    async def open_first_report(self) -> None:
        """Make sure a report is shown; the dashboard lands on one when the account has any."""
        heading = await self.get_text(self.MAIN_HEADING)
        if heading != "Dashboard":
            return
        snaps = await snapshot_all(self.driver, self.REPORT_HEADINGS)
        report = first(snaps, lambda s: s.visible and s.text.strip() not in NON_REPORT_HEADINGS)
        if report is None:
            raise LookupError("No report card found on the dashboard")
        await self.driver.click(report.handle)

        async def _left_dashboard() -> bool:
            return "/dashboard" not in await self.current_url()

        await self.wait_for_condition(_left_dashboard, message="Report did not load")

    async def click_settings_icon(self) -> None:
        await self.click(self.SETTINGS_ICON)

    async def is_on_settings_page(self, timeout_ms: Optional[int] = None) -> bool:
        async def _open() -> bool:
            return (
                await self.is_displayed(self.SETTINGS_DIALOG)
                and await self.is_displayed(self.INPUTS)
                and await self.is_displayed(self.DESCRIPTION_FIELD)
            )

        return await self.is_condition_met(_open, timeout_ms or self.timeout.medium)

    def generate_unique_name(self) -> str:
        return f"Report_{now_ms()}"

    def generate_unique_description(self) -> str:
        return f"Updated description at {now_ms()} - This is an automated test description"

    async def clear_and_enter_name(self, name: str) -> None:
        # fill() replaces the current value
        await self.set_value(self.INPUTS, name)

    async def clear_and_enter_description(self, description: str) -> None:
        await self.set_value(self.DESCRIPTION_FIELD, description)

    async def click_save(self) -> None:
        await self.click(self.SAVE_BUTTON)

    async def wait_for_dialog_closed(self) -> None:
        await self.wait_for_element_to_disappear(self.SETTINGS_DIALOG)

    async def get_success_message_text(self) -> str:
        return await self.get_text(self.SUCCESS_MESSAGE)

    async def is_heading_displayed(self, tag: str, text: str) -> bool:
        cands = candidates(f"{tag}*={text}")
        return await self.is_condition_met(lambda: self.is_displayed(cands), self.timeout.short)
