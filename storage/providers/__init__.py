from .database import DatabaseStore
from .memory import MemoryStore
