"""CLI entrypoint for the glow portrait renderer."""

import sys

from glow_portrait.cli import main


if __name__ == "__main__":
    sys.exit(main())
