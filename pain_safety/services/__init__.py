from .pain_management import PainManagementService
from .live_preview import PainApiClient, DebouncedRequester, LivePreviewSession

__all__ = [
    "PainManagementService",
    "PainApiClient",
    "DebouncedRequester",
    "LivePreviewSession",
]
