"""
Domain models for the Echo Brain system.

This package contains all the core domain models that represent the
business objects and value types in the system.
"""

# Import all models from domain files using wildcard imports
from echo_brain.domains.enums import *
from echo_brain.domains.errors import *
from echo_brain.domains.models import *
from echo_brain.domains.memory import *
from echo_brain.domains.answer import *
from echo_brain.domains.entitlements import *
from echo_brain.domains.routing import *
