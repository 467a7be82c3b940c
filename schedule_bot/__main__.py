"""Allow running as: python -m schedule_bot"""

from .cli import main

main()
