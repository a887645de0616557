"""Tests for appointment status display metadata."""

import pytest

from physiome.services.status_classifier import StatusInfo, classify_status


@pytest.mark.parametrize(
    "status,expected",
    [
        ("pending", StatusInfo("#f59e0b", "⏳", "Pending")),
        ("confirmed", StatusInfo("#10b981", "✅", "Confirmed")),
        ("cancelled", StatusInfo("#ef4444", "❌", "Cancelled")),
        ("completed", StatusInfo("#3b82f6", "🏁", "Completed")),
    ],
)
def test_known_statuses(status, expected):
    assert classify_status(status) == expected


def test_unknown_status_uses_literal_label():
    info = classify_status("rescheduled")

    assert info.color == "#64748b"
    assert info.icon == "📋"
    assert info.label == "rescheduled"


def test_none_is_tolerated():
    assert classify_status(None).label == "None"
