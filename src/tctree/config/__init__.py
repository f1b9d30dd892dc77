#
# config/__init__.py
#
"""
Configuration handling sub-package for tctree.

Exports the loading function and the configuration model.
"""

from .loader import load_config
from .models import ReporterConfig

__all__ = [
    "ReporterConfig",
    "load_config",
]

# 🔼⚙️
