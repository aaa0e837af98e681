"""Configure pytest for the sport events project."""
import os
import sys
from pathlib import Path

# =============================================================================
# Test Environment Configuration
# =============================================================================
# Set environment for tests BEFORE any imports so load_config() sees
# deterministic values regardless of the developer's shell.
os.environ.setdefault("EVENTS_ENV", "test")
os.environ.setdefault("EVENTS_DEFAULT_LOCALE", "fr")

# Add project root so tests can import events, corrector and app
# This must happen at module level (before test collection)
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Ensure paths and environment are set before test collection."""
    os.environ.setdefault("EVENTS_ENV", "test")
    os.environ.setdefault("EVENTS_DEFAULT_LOCALE", "fr")

    root = str(Path(__file__).parent)
    if root not in sys.path:
        sys.path.insert(0, root)
