"""Interactive viewer for the crystal lighting evaluator.

Without ``--exec`` the board opens in manual mode: left click places or
cycles an item, right click removes it and READY submits the board.
"""

from __future__ import annotations

import sys

from crystal_lighting.cli import main


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
