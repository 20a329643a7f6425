"""
Test package for the SmartPark engine

Puts src/ on the import path so the suites run from a source checkout
without installing the package.
"""

import sys
from pathlib import Path

src_root = Path(__file__).parent.parent / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))
