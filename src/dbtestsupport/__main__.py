"""
dbtestsupport - run the CLI with ``python -m dbtestsupport``.
"""

import sys

from dbtestsupport.interface.cli import main


if __name__ == "__main__":
    sys.exit(main())
