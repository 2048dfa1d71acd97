"""Allow ``python -m mandira``."""

import sys

from mandira.cli import main

sys.exit(main())
