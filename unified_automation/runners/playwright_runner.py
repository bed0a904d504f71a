"""Runner process for the Playwright backend."""

from unified_automation.runners.journey_runner import make_runner
from unified_automation.types import Backend

main = make_runner(Backend.PLAYWRIGHT)

if __name__ == "__main__":
    main()
