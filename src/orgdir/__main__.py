"""Allow running as ``python -m orgdir``."""

from orgdir.cli import main

main()
