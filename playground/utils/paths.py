"""
Path utilities for playground state.
"""
import os
from pathlib import Path

def get_playground_home() -> Path:
    """Get the playground home directory, creating if necessary."""
    # Allow override via environment variable
    if 'PLAYGROUND_HOME' in os.environ:
        home = Path(os.environ['PLAYGROUND_HOME'])
    else:
        home = Path.home() / '.ai-playground'

    home.mkdir(parents=True, exist_ok=True)
    return home
