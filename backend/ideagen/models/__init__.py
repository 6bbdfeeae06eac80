from .feedback import FeedbackEntry
from .kv_entry import KVEntry

__all__ = ["FeedbackEntry", "KVEntry"]
