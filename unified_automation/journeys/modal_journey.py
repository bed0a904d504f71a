from unified_automation.journeys.base import BaseJourney
from unified_automation.journeys.registry import register_journey
from unified_automation.pages import DemoAppPage


@register_journey("modal")
class ModalJourney(BaseJourney):
    """Open the confirmation modal, check its title, confirm it closes."""

    async def execute(self) -> None:
        page = DemoAppPage(self.adapter)
        await page.open_confirmation_modal()
        await page.verify_modal_title("Confirmation")
        await page.confirm_modal()
