"""
ipeople-pm - management tool for a self-hosted iPeople Password Manager
"""

__version__ = "1.0.0"

from .core import OperationsDispatcher
from .errors import ManagerError

__all__ = ["OperationsDispatcher", "ManagerError"]
