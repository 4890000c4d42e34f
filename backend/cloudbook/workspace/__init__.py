from .client import NotesApiClient, NotesApiError
from .filters import NoteFilter, ScopeKind, SidebarScope, visible_notes
from .tags import Tag, TagCatalogue
from .workspace import BulkEditResult, NoteWorkspace, Notification

__all__ = [
    "BulkEditResult",
    "NoteFilter",
    "NoteWorkspace",
    "NotesApiClient",
    "NotesApiError",
    "Notification",
    "ScopeKind",
    "SidebarScope",
    "Tag",
    "TagCatalogue",
    "visible_notes",
]
