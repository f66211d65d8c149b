# cyberrank_e2e/pages/team_page.py
from __future__ import annotations

"""Team page
-----------
Team member grid, the Add Team Member dialog, and candidate deletion.

The grid re-renders after every invite/delete, so reads go through bounded
retries; selectors for the dialog's send button and the delete confirmation
are ordered fallback lists because their markup differs between releases.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from cyberrank_e2e.core.errors import ElementNotFound, ResultRejected
from cyberrank_e2e.core.retry import Failed, attempt_action
from cyberrank_e2e.core.waits import WaitSpec
from cyberrank_e2e.pages.base_page import BasePage, candidates
from cyberrank_e2e.selectors.candidate import SelectorCandidate
from cyberrank_e2e.selectors.filters import (
    all_of,
    attribute_contains,
    first,
    is_visible,
    select,
    snapshot_all,
    text_contains_any,
)
from cyberrank_e2e.selectors.locator import Found, probe
from cyberrank_e2e.utils.test_data import unique_email

CANDIDATE_SUFFIX = "(Candidate)"
HEADER_MARKER = "User Email"
TRASH_ICON_SRC = "trash-alt-solid.svg"
CONFIRM_WORDS = ("confirm", "delete", "remove", "yes")

_EMAIL_CELL_RE = re.compile(r"^(.*?)(\s*\(Candidate\))?$", re.DOTALL)


@dataclass(frozen=True)
class TeamMember:
    email: str
    suffix: str
    status: str
    full_text: str

    @property
    def is_candidate(self) -> bool:
        return self.suffix == CANDIDATE_SUFFIX


def is_member_row(text: str) -> bool:
    """Data rows carry an email address; the header row says 'User Email'."""
    return "@" in text and HEADER_MARKER not in text


def parse_member_row(cells: Sequence[str]) -> Optional[TeamMember]:
    """Build a TeamMember from the row's cell texts ([email cell, status cell, ...])."""
    if len(cells) < 2:
        return None
    email_cell = cells[0].strip()
    match = _EMAIL_CELL_RE.match(email_cell)
    email = match.group(1).strip() if match else email_cell
    return TeamMember(
        email=email,
        suffix=CANDIDATE_SUFFIX if CANDIDATE_SUFFIX in email_cell else "",
        status=cells[1].strip(),
        full_text=email_cell,
    )


class TeamPage(BasePage):
    PATH = "/vas/team"

    PAGE_TITLE = candidates("h1*=Team")
    ADD_TEAM_MEMBER_BUTTON = candidates("vaadin-button*=Add Team Member", "button*=Add Team Member")
    IMPORT_TEAM_MEMBERS_BUTTON = candidates("vaadin-button*=Import Team Members")
    ADD_MEMBER_DIALOG = candidates('[role="dialog"]', "vaadin-dialog-overlay")
    EMAIL_FIELD = candidates(
        "vaadin-text-area textarea",
        "vaadin-text-field input",
        'input[type="email"]',
        "textarea",
    )
    SEND_BUTTON = candidates(
        '[role="dialog"] button:has(img)',
        '[role="dialog"] vaadin-button:has(img)',
        '[role="dialog"] button:last-child',
        '[role="dialog"] vaadin-button:last-child',
        ".add-team-member-dialog vaadin-button",
    )
    GRID = candidates('[role="treegrid"]', "vaadin-grid")
    ROW = SelectorCandidate.css('[role="row"]')
    CELL = SelectorCandidate.css('[role="gridcell"]')
    GRID_ICON = SelectorCandidate.css("vaadin-grid vaadin-icon")
    ROW_ICON = SelectorCandidate.css("vaadin-icon")
    SUCCESS_MESSAGE = candidates(
        '[role="alert"]',
        "vaadin-notification-card",
        ".notification",
        "div*=Invitations",
    )
    CONFIRMATION_POPUP = candidates(
        "section#resizerContainer.resizer-container",
        '[role="dialog"]',
        "vaadin-confirm-dialog",
        "vaadin-dialog",
        ".confirmation-dialog",
        ".confirm-popup",
        'div[role="alertdialog"]',
    )
    CONFIRM_BUTTON = candidates(
        '[part="confirm-button"] button',
        '[part="confirm-button"] vaadin-button',
        'button[class*="confirm"]',
        'vaadin-button[class*="confirm"]',
        'button[class*="delete"]',
        'vaadin-button[class*="delete"]',
    )
    ANY_BUTTON = SelectorCandidate.css("button, vaadin-button")

    def __init__(self, driver, settings=None) -> None:
        super().__init__(driver, settings)
        self.deleted_member_email: Optional[str] = None

    # ---------- Page ----------

    async def wait_for_teams_page(self) -> None:
        await self.wait_for_url_contains(self.PATH, self.timeout.long)
        await self.wait_for_element(self.PAGE_TITLE, self.timeout.long)
        await self.wait_for_page_load()

    async def is_on_teams_page(self) -> bool:
        return await self.is_displayed(self.PAGE_TITLE) and await self.is_displayed(self.ADD_TEAM_MEMBER_BUTTON)

    # ---------- Add member ----------

    def generate_unique_email(self, domain: str = "gmail.com") -> str:
        return unique_email("testuser", domain)

    async def click_add_team_member(self) -> None:
        await self.click(self.ADD_TEAM_MEMBER_BUTTON)

    async def wait_for_add_team_member_dialog(self) -> None:
        await self.wait_for_element(self.ADD_MEMBER_DIALOG)

    async def is_add_team_member_dialog_open(self) -> bool:
        return await self.is_displayed(self.ADD_MEMBER_DIALOG) and await self.is_displayed(self.EMAIL_FIELD)

    async def enter_email(self, email: str) -> None:
        await self.set_value(self.EMAIL_FIELD, email)

    async def click_send_button(self) -> None:
        await self.wait_for_element(self.EMAIL_FIELD, self.timeout.short)
        found = await self.click(self.SEND_BUTTON)
        self.log.info(f"Send button clicked via {found.candidate}")

    # ---------- Grid ----------

    async def read_grid_once(self) -> List[TeamMember]:
        members: List[TeamMember] = []
        rows = select(await snapshot_all(self.driver, self.ROW), lambda s: is_member_row(s.text))
        for row in rows:
            cells = [
                await self.driver.get_text(cell)
                for cell in await self.driver.find_all(self.CELL, within=row.handle)
            ]
            member = parse_member_row(cells)
            if member is not None:
                members.append(member)
        return members

    async def get_team_members(self) -> List[TeamMember]:
        """
        Read the member grid, retrying while it comes back empty.

        An empty grid after every attempt is a legitimate answer and is
        returned as such; any other failure raises ActionFailed.
        """
        # header + at least one row, when the grid has rendered at all
        await self.is_condition_met(lambda: self._row_count_at_least(2), self.timeout.short)
        spec = WaitSpec.fixed_delay(self.timeout.very_short, message="grid loading retry")
        outcome = await attempt_action(
            self.read_grid_once,
            self.settings.MAX_RETRIES,
            spec,
            accept=bool,
            description="read team grid",
        )
        if isinstance(outcome, Failed):
            if isinstance(outcome.last_error, ResultRejected):
                self.log.info("Team grid has no member rows")
                return list(outcome.last_error.result)
            raise outcome.to_error() from outcome.last_error
        self.log.debug(f"Found {len(outcome.value)} team members")
        return outcome.value

    async def _row_count_at_least(self, n: int) -> bool:
        return len(await self.driver.find_all(self.ROW)) >= n

    async def is_team_member_in_list(self, email: str) -> bool:
        return any(m.email == email for m in await self.get_team_members())

    async def get_team_member_by_email(self, email: str) -> Optional[TeamMember]:
        for member in await self.get_team_members():
            if member.email == email:
                return member
        return None

    async def wait_for_team_member(self, email: str, timeout_ms: Optional[int] = None) -> TeamMember:
        """Poll the grid until `email` shows up (invites land asynchronously)."""
        found: List[TeamMember] = []

        async def _listed() -> bool:
            member = await self.get_team_member_by_email(email)
            if member is not None:
                found.append(member)
            return member is not None

        await self.wait_for_condition(_listed, timeout_ms or self.timeout.long, f"{email} not in team list")
        return found[-1]

    # ---------- Messages ----------

    async def wait_for_success_message(self) -> None:
        await self.wait_for_element(self.SUCCESS_MESSAGE, self.timeout.medium_long)

    async def get_success_message_text(self) -> str:
        return await self.get_text(self.SUCCESS_MESSAGE, self.timeout.medium_long)

    async def is_success_message_visible(self, timeout_ms: Optional[int] = None) -> bool:
        return await self.is_condition_met(
            lambda: self.is_displayed(self.SUCCESS_MESSAGE),
            timeout_ms or self.timeout.medium_long,
        )

    async def get_deletion_success_message(self) -> str:
        return await self.get_success_message_text()

    # ---------- Candidates / deletion ----------

    async def has_candidate_users(self) -> bool:
        return any(m.is_candidate for m in await self.get_team_members())

    async def get_first_candidate_user(self) -> Optional[TeamMember]:
        for member in await self.get_team_members():
            if member.is_candidate:
                return member
        return None

    async def _trash_icon_for(self, email: str):
        rows = select(
            await snapshot_all(self.driver, self.ROW),
            lambda s: email in s.text and CANDIDATE_SUFFIX in s.text,
        )
        if not rows:
            raise LookupError(f"Could not find candidate user with email: {email}")

        is_trash = attribute_contains("src", TRASH_ICON_SRC)
        icons = await snapshot_all(self.driver, self.ROW_ICON, attributes=("src",), within=rows[0].handle, with_text=False)
        icon = first(icons, is_trash)
        if icon is None:
            # Grid cell content is slotted outside the row in some renders.
            self.log.debug("No trash icon inside the row; searching the whole grid")
            icons = await snapshot_all(self.driver, self.GRID_ICON, attributes=("src",), with_text=False)
            icon = first(icons, is_trash)
        if icon is None:
            raise LookupError(f"Could not find trash icon for candidate: {email}")
        return icon.handle

    async def click_trash_icon_for_candidate(self, email: Optional[str] = None) -> str:
        target = email
        if not target:
            candidate = await self.get_first_candidate_user()
            if candidate is None:
                raise LookupError("No candidate users found to delete")
            target = candidate.email

        handle = await self._trash_icon_for(target)
        await self.driver.scroll_into_view(handle)
        await self.driver.click(handle)
        self.deleted_member_email = target
        self.log.info(f"Requested deletion of candidate {target}")
        return target

    async def is_confirmation_popup_displayed(self) -> bool:
        return await self.is_displayed(self.CONFIRMATION_POPUP)

    async def click_confirm_on_popup(self) -> None:
        await self.find(self.CONFIRMATION_POPUP, message="Confirmation popup did not appear")

        result = await probe(self.driver, self.CONFIRM_BUTTON)
        if isinstance(result, Found):
            handle = result.handle
        else:
            buttons = await snapshot_all(self.driver, self.ANY_BUTTON)
            snap = first(buttons, all_of(is_visible, text_contains_any(*CONFIRM_WORDS)))
            if snap is None:
                raise ElementNotFound(result, "Could not find confirm button in popup")
            handle = snap.handle
        await self.driver.click(handle)

    async def is_team_member_removed(self, email: Optional[str] = None) -> bool:
        target = email or self.deleted_member_email
        if not target:
            raise ValueError("No email provided to check for removal")

        async def _gone() -> bool:
            return all(m.email != target for m in await self.get_team_members())

        return await self.is_condition_met(_gone, self.timeout.medium)
