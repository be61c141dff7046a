from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

def get_utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)

def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def format_datetime(dt: datetime) -> str:
    """Format datetime to ISO format in UTC"""
    return ensure_utc(dt).isoformat()

def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string into an aware UTC datetime.

    A trailing ``Z`` is accepted and naive values are taken as UTC.
    """
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(value))

def normalize_email(email: str) -> str:
    return email.strip().lower()

def paginate_results(items: List[Any], page: int = 1, page_size: int = 10) -> Dict[str, Any]:
    """
    Paginate a list of items

    Args:
        items: List of items to paginate
        page: Page number (1-based)
        page_size: Number of items per page

    Returns:
        Dict containing paginated results and metadata
    """
    page = max(page, 1)
    page_size = max(page_size, 1)
    start = (page - 1) * page_size
    end = start + page_size

    total_items = len(items)
    total_pages = (total_items + page_size - 1) // page_size

    return {
        "items": items[start:end],
        "pagination": {
            "current_page": page,
            "total_pages": total_pages,
            "page_size": page_size,
            "total_items": total_items
        }
    }
