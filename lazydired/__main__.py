"""Module entrypoint for ``python -m lazydired``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing happens in ``lazydired.cli``.
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
