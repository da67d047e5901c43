"""
run_aligner.py: CLI Entry Point

Forwards execution to the CLI defined in `src/grid_aligner/cli.py` so the
tool can be run from a checkout without installing the package.

Usage:
    python run_aligner.py --board board.json --columns 3 [options]

For help on available options, run:
    python run_aligner.py --help
"""
import sys
# Source code in src/ subdirectory
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import grid_aligner.cli as ga_cli

if __name__ == "__main__":
    sys.exit(ga_cli.main())
