"""
Repository implementations for data access.

This package contains repository implementations that provide
data access capabilities for the domain models.
"""

from echo_brain.repositories.memory import *
from echo_brain.repositories.answer import *
from echo_brain.repositories.user import *
