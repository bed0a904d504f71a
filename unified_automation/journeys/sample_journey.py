"""End-to-end tour of the demo application."""

from unified_automation.journeys.base import BaseJourney
from unified_automation.journeys.registry import register_journey
from unified_automation.pages import DemoAppPage


@register_journey("sample")
class SampleJourney(BaseJourney):
    """Form, modal, delayed action and data grid in one pass."""

    async def execute(self) -> None:
        page = DemoAppPage(self.adapter)

        await page.login("automation-user", "automation-password-123")
        await page.verify_login_success("automation-user")

        await page.open_confirmation_modal()
        await page.verify_modal_title("Confirmation")
        await page.confirm_modal()

        await page.trigger_and_verify_delayed_action("success")

        await page.verify_min_table_row_count(3)
