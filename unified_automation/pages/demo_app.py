"""
DemoAppPage encapsulates the selectors and interactions of the demo target
application (login form, confirmation modal, delayed action, data grid).
"""
import logging

from unified_automation.adapters.base import ELEMENT_TIMEOUT_MS
from unified_automation.pages.base import BasePage
from unified_automation.utils.wait import wait_for_condition

logger = logging.getLogger(__name__)


class DemoAppPage(BasePage):
    """Page object for the demo application's single screen."""

    SELECTORS = {
        "username_input": '[data-testid="input-username"]',
        "password_input": '[data-testid="input-password"]',
        "role_select": '[data-testid="select-role"]',
        "submit_button": '[data-testid="btn-submit"]',
        "reset_button": '[data-testid="btn-reset"]',
        "form_result": '[data-testid="form-result"]',
        "open_modal_button": '[data-testid="btn-open-modal"]',
        "modal_overlay": '[data-testid="modal-overlay"]',
        "modal_title": ".modal h3",
        "modal_confirm_button": '[data-testid="modal-confirm"]',
        "modal_close_button": '[data-testid="modal-close"]',
        "delayed_button": '[data-testid="btn-delayed"]',
        "delayed_result": "#delayed-result",
        "table_rows": "tbody tr",
    }

    async def navigate_to(self, app_url: str) -> None:
        await self.navigate(app_url)

    # Login form

    async def login(self, username: str, password: str) -> None:
        """Fill the login form and submit it."""
        logger.info(f"Logging in as {username}")
        await self.adapter.fill(self.selectors["username_input"], username)
        await self.adapter.fill(self.selectors["password_input"], password)
        await self.adapter.click(self.selectors["submit_button"])

    async def verify_login_success(self, expected_username: str) -> None:
        """Wait for the result region and check it names the user."""
        result = self.selectors["form_result"]
        await self.wait_for_selector(f"{result}:not(.hidden)")
        result_text = await self.adapter.get_text(result)
        self.verify(
            "Login",
            expected_username in result_text,
            expected=f"result containing '{expected_username}'",
            actual=result_text,
        )

    # Confirmation modal

    async def open_confirmation_modal(self) -> None:
        await self.adapter.click(self.selectors["open_modal_button"])
        await self.wait_for_selector(f"{self.selectors['modal_overlay']}:not(.hidden)")

    async def verify_modal_title(self, expected_title: str) -> None:
        """Exact, case-sensitive title match."""
        actual_title = await self.adapter.get_text(self.selectors["modal_title"])
        self.verify("Modal title", actual_title == expected_title, expected_title, actual_title)

    async def confirm_modal(self) -> None:
        await self.adapter.click(self.selectors["modal_confirm_button"])
        await self.wait_for_hidden(self.selectors["modal_overlay"])

    # Delayed action

    async def trigger_and_verify_delayed_action(self, expected_snippet: str = "success") -> None:
        await self.adapter.click(self.selectors["delayed_button"])
        result = self.selectors["delayed_result"]
        try:
            status_text = await wait_for_condition(
                lambda: self.adapter.get_text(result),
                lambda text: bool(text.strip()),
                timeout_ms=ELEMENT_TIMEOUT_MS,
                error_message=f"'{result}' stayed empty",
            )
        except TimeoutError:
            status_text = ""
        self.verify(
            "Delayed action",
            expected_snippet.lower() in status_text.lower(),
            expected=f"text containing '{expected_snippet}'",
            actual=status_text,
        )

    # Data grid

    async def verify_min_table_row_count(self, min_rows: int) -> None:
        actual_count = await self.adapter.count_elements(self.selectors["table_rows"])
        self.verify(
            "Table row count",
            actual_count >= min_rows,
            expected=f"at least {min_rows} rows",
            actual=actual_count,
        )
