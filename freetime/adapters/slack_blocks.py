"""
Block Kit rendering of free slots and help text.
"""

from typing import Any, Dict, List, Sequence

from ..domain.models import FreeSlot

Block = Dict[str, Any]

NO_AVAILABILITY_TEXT = "今週は空き時間が見つかりませんでした。"


def group_slots_by_date(slots: Sequence[FreeSlot]) -> Dict[str, List[FreeSlot]]:
    """Group slots per date, dates in first-seen order."""
    slots_by_date: Dict[str, List[FreeSlot]] = {}
    for slot in slots:
        slots_by_date.setdefault(slot.date, []).append(slot)
    return slots_by_date


def build_free_slot_lines(slots: Sequence[FreeSlot]) -> List[str]:
    """One line per date: ``*2/2(月)* 10:00-11:00, 12:00-19:00``."""
    return [
        f"*{day_slots[0].date_label}* " + ", ".join(s.format_range() for s in day_slots)
        for day_slots in group_slots_by_date(slots).values()
    ]


def build_free_slot_blocks(slots: Sequence[FreeSlot]) -> List[Block]:
    """Render the shared free time; an empty list says so explicitly."""
    if not slots:
        return [
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": NO_AVAILABILITY_TEXT},
            }
        ]

    return [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "全員の空き時間", "emoji": True},
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": "\n".join(build_free_slot_lines(slots))},
        },
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": "ご都合いかがでしょうか？"}],
        },
        {"type": "divider"},
    ]


def build_help_blocks() -> List[Block]:
    return [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "空き時間検索Bot", "emoji": True},
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "チームメンバー全員のカレンダーから空き時間を検索してチャンネルに共有します。",
            },
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*使い方:*\n`/cal` - 今週の空き時間をチャンネルに共有\n`/cal help` - このヘルプを表示",
            },
        },
        {
            "type": "context",
            "elements": [
                {"type": "mrkdwn", "text": "平日10:00-19:00の空き時間を検索します（土日除く）"}
            ],
        },
        {"type": "divider"},
    ]
