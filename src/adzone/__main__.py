"""Allow ``python -m adzone``."""

import sys

from adzone.cli import main

sys.exit(main())
