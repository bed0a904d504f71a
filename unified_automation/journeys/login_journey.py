from unified_automation.journeys.base import BaseJourney
from unified_automation.journeys.registry import register_journey
from unified_automation.pages import DemoAppPage


@register_journey("login")
class LoginJourney(BaseJourney):
    username = "automation-user"
    password = "automation-password-123"

    async def execute(self) -> None:
        page = DemoAppPage(self.adapter)
        await page.login(self.username, self.password)
        await page.verify_login_success(self.username)
