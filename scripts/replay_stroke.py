#!/usr/bin/env python3
"""Replay a stroke file through the brush pipeline (checkout entry point).

Same CLI as the installed ``brushflow-replay`` command:

    python scripts/replay_stroke.py --stroke_file strokes/s1.json --output outputs/s1.png
    python scripts/replay_stroke.py --synthetic wave --set sharpness=0.3
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from brushflow.replay import main  # noqa: E402

if __name__ == '__main__':
    sys.exit(main())
