"""
Service implementations for the Echo Brain system.

These services implement the business logic interfaces defined in
echo_brain.interfaces.services.
"""

from echo_brain.services.normalizer import *
from echo_brain.services.entitlements import *
from echo_brain.services.enrichment import *
from echo_brain.services.embedding import *
from echo_brain.services.background import *
from echo_brain.services.ingestion import *
from echo_brain.services.scoring import *
from echo_brain.services.retrieval import *
from echo_brain.services.intent import *
from echo_brain.services.answer import *
from echo_brain.services.brain import *
