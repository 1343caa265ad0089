"""CLI entry point: python -m worksheetweb"""

from worksheetweb.cli import main

main()
