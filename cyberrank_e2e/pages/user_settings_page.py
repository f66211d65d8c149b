# cyberrank_e2e/pages/user_settings_page.py
from __future__ import annotations

from typing import List, Optional

from cyberrank_e2e.pages.base_page import BasePage, candidates
from cyberrank_e2e.selectors.candidate import SelectorCandidate
from cyberrank_e2e.selectors.filters import all_of, first, is_visible, snapshot_all, text_contains_any, text_equals
from cyberrank_e2e.utils.timing import now_ms

SETTINGS_LABELS = ("User Settings", "Settings")


class UserSettingsPage(BasePage):
    PATH = "/vas/usersettings"

    PAGE_TITLE = candidates("h1*=User Settings")
    GENERAL_TAB = candidates('[role="tab"]*=General')
    SECURITY_TAB = candidates('[role="tab"]*=Security')
    MENU_ITEMS = SelectorCandidate.css("vaadin-menu-bar-item, menuitem, vaadin-context-menu-item")
    NICKNAME_DISPLAY = candidates("vaadin-horizontal-layout > div:first-child", "vaadin-horizontal-layout div")
    NICKNAME_INPUT = candidates(
        "vaadin-horizontal-layout input",
        "vaadin-text-field input",
        'input[type="text"]',
        '[contenteditable="true"]',
    )
    BUTTONS = SelectorCandidate.css("vaadin-button")
    LAYOUT_BUTTONS = SelectorCandidate.css("vaadin-vertical-layout vaadin-button, vaadin-horizontal-layout vaadin-button")
    SAVE_NICKNAME_BUTTON = candidates('//vaadin-button[.//vaadin-icon[contains(@src, "save-solid.svg")]]')
    CANCEL_NICKNAME_BUTTON = candidates('//vaadin-button[.//vaadin-icon[contains(@src, "times-circle-solid.svg")]]')

    async def wait_for_user_settings_page(self) -> None:
        await self.wait_for_url_contains(self.PATH, self.timeout.long)
        await self.wait_for_element(self.PAGE_TITLE, self.timeout.long)
        await self.wait_for_page_load()

    async def _settings_menu_item(self):
        snaps = await snapshot_all(self.driver, self.MENU_ITEMS)
        return first(snaps, all_of(is_visible, text_contains_any(*SETTINGS_LABELS, case_sensitive=True)))

    async def is_user_settings_dropdown_visible(self) -> bool:
        return await self.is_condition_met(lambda: self._is_menu_item_present(), self.timeout.short)

    async def _is_menu_item_present(self) -> bool:
        return await self._settings_menu_item() is not None

    async def click_menu_item(self, label: str) -> None:
        await self.click(candidates(f"vaadin-menu-bar-item*={label}", f"vaadin-context-menu-item*={label}", f"menuitem*={label}"))

    async def click_user_settings(self) -> None:
        snap = await self._settings_menu_item()
        if snap is None:
            raise LookupError("Could not find User Settings menu item")
        await self.driver.click(snap.handle)

    async def is_on_user_settings_page(self) -> bool:
        return await self.is_displayed(self.PAGE_TITLE) and await self.is_displayed(self.GENERAL_TAB)

    async def is_general_tab_selected(self) -> bool:
        found = await self.find(self.GENERAL_TAB)
        return await self.driver.get_attribute(found.handle, "selected") is not None

    # ---------- Nickname ----------

    async def get_current_nickname(self) -> str:
        return await self.get_text(self.NICKNAME_DISPLAY)

    async def click_nickname_edit(self) -> None:
        """The edit control is an icon-only button in the General area."""
        snaps = [s for s in await snapshot_all(self.driver, self.BUTTONS) if s.visible]
        # the first few icon-only buttons belong to the app header
        target = first(snaps[3:], text_equals(""))
        if target is None:
            target = first(await snapshot_all(self.driver, self.LAYOUT_BUTTONS), all_of(is_visible, text_equals("")))
        if target is None:
            raise LookupError("Could not find nickname edit button")
        await self.driver.click(target.handle)

    def generate_unique_nickname(self) -> str:
        return f"TestUser{now_ms()}"

    async def enter_nickname(self, nickname: str) -> None:
        await self.set_value(self.NICKNAME_INPUT, nickname)

    async def click_save_nickname(self) -> None:
        await self.click(self.SAVE_NICKNAME_BUTTON)

    async def click_cancel_nickname(self) -> None:
        await self.click(self.CANCEL_NICKNAME_BUTTON)

    async def is_nickname_updated(self, expected: str, timeout_ms: Optional[int] = None) -> bool:
        async def _shows() -> bool:
            return await self.get_current_nickname() == expected

        return await self.is_condition_met(_shows, timeout_ms or self.timeout.medium)

    async def visible_menu_labels(self) -> List[str]:
        return [s.text.strip() for s in await snapshot_all(self.driver, self.MENU_ITEMS) if s.visible]
