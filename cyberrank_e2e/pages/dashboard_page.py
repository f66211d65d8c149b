# cyberrank_e2e/pages/dashboard_page.py
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from cyberrank_e2e.core.errors import E2EError
from cyberrank_e2e.pages.base_page import BasePage, candidates
from cyberrank_e2e.selectors.candidate import SelectorCandidate
from cyberrank_e2e.selectors.filters import first, snapshot_all, text_contains_any

_COUNT_RE = re.compile(r"\((\d+)\)")

_JS_CLICK = "el => el.click()"


def parse_menu_count(label: str) -> int:
    """'My Vendors (12)' -> 12; labels without a count read as 0."""
    match = _COUNT_RE.search(label or "")
    return int(match.group(1)) if match else 0


class DashboardPage(BasePage):
    PATH = "/vas/dashboard"

    DASHBOARD_TITLE = candidates("h1*=Dashboard")
    HEADER = candidates("h1")
    USER_EMAIL_DISPLAY = candidates("vaadin-menu-bar-item span*=@", "vaadin-menu-bar-item*=@")
    NEW_ASSESSMENT_BUTTON = candidates("button*=New Assessment", "vaadin-button*=New Assessment")
    CREDITS_DISPLAY = candidates("h4*=Credits")
    SIDE_NAV = candidates("vaadin-side-nav")
    PROFILE_MENU_ITEMS = SelectorCandidate.css("vaadin-menu-bar-item")
    RECENT_SECTION = candidates('[class*="recent"]', '[class*="activity"]', '[class*="rating"]')
    ACTIVITY_ITEMS = SelectorCandidate.css('vaadin-grid-cell-content, [class*="card"], [class*="item"], li')
    ACTIVITY_ENTRIES = SelectorCandidate.css('vaadin-grid-cell-content, [class*="card"], [class*="item"]')

    MENU: Dict[str, Tuple[SelectorCandidate, ...]] = {
        "dashboard": candidates('a[href="dashboard"]'),
        "my vendors": candidates('a[href="myvendors"]'),
        "directory": candidates('a[href="directory"]'),
        "questionnaires": candidates('a[href="questionnaire"]'),
        "individuals": candidates('a[href="individuals"]'),
        "top rank": candidates('a[href="toprank"]'),
        "referrals": candidates('a[href="referrals"]'),
        "teams": candidates('a[href="team"]', "vaadin-side-nav-item*=Team"),
        "billing": candidates('a[href="billing"]'),
        "api": candidates('a[href="apisub"]'),
    }

    # Dashboard widgets by the names used in feature tables.
    WIDGETS: Dict[str, Tuple[SelectorCandidate, ...]] = {
        "security score": candidates('[class*="score"]', '[class*="rating"]', '[class*="credit"]'),
        "recent activities": RECENT_SECTION,
        "quick actions": candidates("vaadin-button", "button"),
        "credits": CREDITS_DISPLAY,
    }

    async def wait_for_dashboard(self) -> None:
        await self.wait_for_url_contains(self.PATH, self.timeout.long)
        await self.wait_for_element(self.DASHBOARD_TITLE, self.timeout.long)
        await self.wait_for_page_load()

    async def ensure_open(self) -> None:
        if self.PATH not in await self.current_url():
            await self.open()
            await self.wait_for_dashboard()

    async def get_header(self) -> str:
        return await self.get_text(self.HEADER)

    async def get_user_email(self) -> str:
        return await self.get_text(self.USER_EMAIL_DISPLAY)

    async def get_credits_amount(self) -> str:
        return await self.get_text(self.CREDITS_DISPLAY)

    async def click_new_assessment(self) -> None:
        await self.click(self.NEW_ASSESSMENT_BUTTON)

    def menu_item(self, name: str) -> Tuple[SelectorCandidate, ...]:
        try:
            return self.MENU[name.strip().lower()]
        except KeyError:
            raise KeyError(f'Menu item "{name}" not found') from None

    async def navigate_to_menu_item(self, name: str) -> None:
        await self.click(self.menu_item(name))

    async def click_sidebar_item(self, label: str) -> None:
        """Sidebar entry by visible label, falling back to any element with that text."""
        await self.wait_for_element(self.SIDE_NAV)
        await self.click(candidates(f"vaadin-side-nav-item*={label}", f"*={label}"))

    async def get_menu_count(self, name: str) -> int:
        return parse_menu_count(await self.get_text(self.menu_item(name)))

    async def get_vendor_count(self) -> int:
        return await self.get_menu_count("my vendors")

    async def get_directory_count(self) -> int:
        return await self.get_menu_count("directory")

    async def is_logged_in(self) -> bool:
        return await self.is_displayed(self.DASHBOARD_TITLE) and await self.is_displayed(self.USER_EMAIL_DISPLAY)

    async def is_widget_displayed(self, name: str) -> bool:
        cands = self.WIDGETS.get(name.strip().lower()) or candidates(f"*={name}")
        return await self.is_condition_met(lambda: self.is_displayed(cands), self.timeout.medium)

    async def get_activity_texts(self) -> List[str]:
        snaps = await snapshot_all(self.driver, self.ACTIVITY_ITEMS)
        return [s.text.strip() for s in snaps if s.visible and s.text.strip()]

    async def get_first_activity_text(self) -> Optional[str]:
        """Text of the first activity entry, or None when the page shows none."""
        handles = await self.driver.find_all(self.ACTIVITY_ENTRIES)
        if not handles:
            return None
        return (await self.driver.get_text(handles[0]) or "").strip()

    async def is_section_displayed(self, section: str) -> bool:
        """URL carries the section name, or a heading with it is visible."""
        headings = candidates(f"h1*={section}", f"h2*={section}", f"h3*={section}")

        async def _shown() -> bool:
            if section.lower() in (await self.current_url()).lower():
                return True
            return await self.is_displayed(headings)

        return await self.is_condition_met(_shown, self.timeout.medium)

    async def open_user_profile_menu(self, email_hint: Optional[str] = None) -> None:
        """
        Click the menu-bar item showing the signed-in account. A plain click
        that keeps failing falls back to a JS click on the same element.
        """
        await self.wait_for_page_load()
        markers = (email_hint,) if email_hint else ("@",)

        async def _menu_item():
            snaps = await snapshot_all(self.driver, self.PROFILE_MENU_ITEMS)
            return first(snaps, text_contains_any(*markers))

        found = []

        async def _present() -> bool:
            snap = await _menu_item()
            if snap is not None:
                found.append(snap)
            return snap is not None

        await self.wait_for_condition(_present, message="Could not find email menu item")
        handle = found[-1].handle
        await self.driver.scroll_into_view(handle)
        try:
            await self.driver.click(handle)
        except E2EError:
            raise
        except Exception as exc:
            self.log.warning(f"Profile menu click failed ({exc!r}); using JS click")
            await self.driver.evaluate_on(handle, _JS_CLICK)
