"""Pytest configuration for the tinyc test suite."""

import sys
from pathlib import Path

# Add repository root to path for tinyc imports
sys.path.insert(0, str(Path(__file__).parent.parent))
