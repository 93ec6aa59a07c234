from .exceptions import DuplicateRecordError, StorageConfigurationError, StorageError
from .factory import StoreFactory
from .interface import AccountStore, SessionStore
from .records import AccountRecord, SessionRecord
