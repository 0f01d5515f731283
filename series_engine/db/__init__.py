# Persistence module
from .database import Database
from .result_cache import InMemoryStore, KeyValueStore, ResultCache, fingerprint
