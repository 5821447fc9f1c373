"""
Package entry point.

Allows running the application via:

    python -m workdaycal

This simply forwards execution to workdaycal.cli.main().
"""

from workdaycal.cli import main

if __name__ == "__main__":
    main()
