"""Runner process for the Selenium backend."""

from unified_automation.runners.journey_runner import make_runner
from unified_automation.types import Backend

main = make_runner(Backend.SELENIUM)

if __name__ == "__main__":
    main()
