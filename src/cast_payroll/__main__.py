"""Entry point for ``python -m cast_payroll``."""

import sys

from cast_payroll.cli import main

if __name__ == "__main__":
    sys.exit(main())
