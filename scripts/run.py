"""Run ask from a source checkout without installing it."""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ask_cli.cli import main

if __name__ == "__main__":
    main()
