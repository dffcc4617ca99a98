"""
File-based storage for playground state.
"""
from .base import BaseStorage
from .credentials import CredentialStorage
from .profiles import ProfileStorage
from .settings import SettingsStorage
from .starred import StarredStorage

__all__ = [
    'BaseStorage',
    'CredentialStorage',
    'ProfileStorage',
    'SettingsStorage',
    'StarredStorage',
]
