from typing import NamedTuple


class StatusInfo(NamedTuple):
    color: str
    icon: str
    label: str


_STATUS_INFO = {
    "pending": StatusInfo("#f59e0b", "⏳", "Pending"),
    "confirmed": StatusInfo("#10b981", "✅", "Confirmed"),
    "cancelled": StatusInfo("#ef4444", "❌", "Cancelled"),
    "completed": StatusInfo("#3b82f6", "🏁", "Completed"),
}


def classify_status(status) -> StatusInfo:
    """Display metadata for an appointment status. Unknown values get a neutral badge."""
    info = _STATUS_INFO.get(status)
    if info is None:
        return StatusInfo("#64748b", "📋", str(status))
    return info
