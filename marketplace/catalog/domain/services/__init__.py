from .moderation_service import ModerationService, ReviewTarget
from .search_service import SearchService


__all__ = [
    "ModerationService",
    "ReviewTarget",
    "SearchService",
]
