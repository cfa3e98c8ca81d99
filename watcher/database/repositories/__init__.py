# watcher/database/repositories/__init__.py

from .filter_repository import FilterRepository
from .watched_event_repository import WatchedEventRepository
from .event_repository import EventRepository
from .method_repository import MethodRepository
from .block_retriever import BlockRetriever
