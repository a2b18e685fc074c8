from .api import ApiClient
from .config import ClientSettings
from .session import SessionStorage
from .store import BulkResult, ExpenseStore

__all__ = ["ApiClient", "BulkResult", "ClientSettings", "ExpenseStore", "SessionStorage"]
