"""Allow running pyhuewatch with ``python -m pyhuewatch``."""

import sys

from .cli import main

sys.exit(main())
