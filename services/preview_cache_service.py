"""
Preview cache for bulk imports.

ImportService.preview() stores each ImportPreview here under a fresh id.
commit_preview() looks the preview up, commits its canonical CSV text
and evicts it. Entries expire after settings.preview_ttl_minutes, so an
abandoned review never gets committed later. In-process only: previews
do not survive a restart and are not shared between workers.
"""
import uuid
from datetime import datetime, timedelta
from typing import Optional

from config import settings
from models.import_preview import ImportPreview

# preview_id → (expires_at, preview)
_previews: dict[str, tuple[datetime, ImportPreview]] = {}


def store_preview(preview: ImportPreview, ttl_minutes: Optional[int] = None) -> str:
    """
    Cache a preview until it is committed, cancelled or expires.

    Args:
        preview: Reconciled preview awaiting review
        ttl_minutes: Override for settings.preview_ttl_minutes

    Returns:
        preview_id to pass to commit_preview()
    """
    ttl = ttl_minutes if ttl_minutes is not None else settings.preview_ttl_minutes
    preview_id = str(uuid.uuid4())
    _previews[preview_id] = (datetime.now() + timedelta(minutes=ttl), preview)
    _evict_expired()
    return preview_id


def retrieve_preview(preview_id: str) -> Optional[ImportPreview]:
    """Preview awaiting commit, or None once expired or evicted."""
    entry = _previews.get(preview_id)
    if entry is None:
        return None

    expires_at, preview = entry
    if datetime.now() > expires_at:
        del _previews[preview_id]
        return None
    return preview


def delete_preview(preview_id: str) -> None:
    """Evict a preview after commit or cancel. Unknown ids are ignored."""
    _previews.pop(preview_id, None)


def clear_previews() -> None:
    _previews.clear()


def _evict_expired() -> None:
    now = datetime.now()
    for preview_id in [k for k, (expires_at, _) in _previews.items() if now > expires_at]:
        del _previews[preview_id]
