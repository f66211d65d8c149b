# cyberrank_e2e/pages/language_page.py
from __future__ import annotations

from typing import Dict, Iterable, Tuple

from cyberrank_e2e.pages.base_page import BasePage, candidates
from cyberrank_e2e.selectors.candidate import SelectorCandidate


class LanguagePage(BasePage):
    """Language selector on the public login page, plus the translated home navigation."""

    PATH = "/vas/login"

    LANGUAGE_SELECTOR = candidates('vaadin-select-value-button[role="button"]', "vaadin-select")
    CURRENT_LANGUAGE = candidates('vaadin-select-value-button[role="button"] span', 'vaadin-select-value-button[role="button"]')
    BACK_TO_HOME_BUTTON = candidates("button*=Back to Home", "vaadin-button*=Back to Home")

    OPTIONS: Dict[str, Tuple[SelectorCandidate, ...]] = {
        "english": candidates('[role="option"]*=English', "vaadin-select-item*=English"),
        "indonesian": candidates("vaadin-select-item*=Indonesian", '[role="option"]*=Indonesian'),
        "malaysian": candidates('[role="option"]*=Malaysian', "vaadin-select-item*=Malaysian"),
    }

    async def click_language_selector(self) -> None:
        await self.click(self.LANGUAGE_SELECTOR)

    async def select_language(self, language: str) -> None:
        try:
            option = self.OPTIONS[language.strip().lower()]
        except KeyError:
            raise KeyError(f'Language "{language}" not supported') from None
        await self.click(option)
        self.log.info(f"Language selected: {language}")

    async def get_current_language(self) -> str:
        return await self.get_text(self.CURRENT_LANGUAGE)

    async def wait_for_language(self, language: str) -> None:
        async def _selected() -> bool:
            return language.lower() in (await self.get_current_language()).lower()

        await self.wait_for_condition(_selected, message=f"Language did not change to {language}")

    async def go_to_home_page(self) -> None:
        await self.click(self.BACK_TO_HOME_BUTTON)

    async def is_nav_item_displayed(self, label: str) -> bool:
        return await self.is_displayed(candidates(f"*={label}"))

    async def are_nav_items_displayed(self, labels: Iterable[str]) -> bool:
        for label in labels:
            if not await self.is_nav_item_displayed(label):
                return False
        return True

    async def wait_for_nav_items(self, labels: Iterable[str]) -> None:
        wanted = list(labels)
        await self.wait_for_condition(
            lambda: self.are_nav_items_displayed(wanted),
            self.timeout.medium_long,
            f"navigation items did not appear: {wanted}",
        )

    async def get_visible_label_text(self, label: str) -> str:
        """Text of the first visible element containing `label`."""
        return await self.get_text(candidates(f"*={label}"))
