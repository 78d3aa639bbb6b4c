from __future__ import annotations

from hue_bridge.cli import main


if __name__ == "__main__":
    main()
