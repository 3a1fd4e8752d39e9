"""
Badge catalog — static, loaded once at import.

Categories:
  - streak:   consecutive study days
  - hours:    lifetime minutes (requirement is in minutes)
  - sessions: lifetime completed sessions
  - special:  event-time rules (early bird, night owl, weekend, perfect week)
"""

from __future__ import annotations

from models import Badge, BadgeCategory


def _badge(badge_id: str, name: str, icon: str, description: str,
           category: BadgeCategory, requirement: int) -> Badge:
    return Badge(
        id=badge_id,
        name=name,
        icon=icon,
        description=description,
        category=category,
        requirement=requirement,
    )


BADGES: tuple[Badge, ...] = (
    # ── Streak ─────────────────────────────────────────────
    _badge("streak_3", "Getting Started", "🔥", "3 day study streak", BadgeCategory.STREAK, 3),
    _badge("streak_7", "Weekly Warrior", "⚔️", "7 day study streak", BadgeCategory.STREAK, 7),
    _badge("streak_14", "Consistent", "💪", "14 day study streak", BadgeCategory.STREAK, 14),
    _badge("streak_30", "Monthly Master", "👑", "30 day study streak", BadgeCategory.STREAK, 30),
    _badge("streak_100", "Legendary", "🏆", "100 day study streak", BadgeCategory.STREAK, 100),

    # ── Study hours ────────────────────────────────────────
    _badge("hours_1", "First Hour", "⏰", "Study for 1 hour total", BadgeCategory.HOURS, 60),
    _badge("hours_10", "Dedicated", "📚", "10 hours studied", BadgeCategory.HOURS, 600),
    _badge("hours_50", "Scholar", "🎓", "50 hours studied", BadgeCategory.HOURS, 3000),
    _badge("hours_100", "Expert", "🌟", "100 hours studied", BadgeCategory.HOURS, 6000),
    _badge("hours_500", "Master", "💎", "500 hours studied", BadgeCategory.HOURS, 30000),

    # ── Sessions ───────────────────────────────────────────
    _badge("first_session", "First Steps", "🎯", "Complete first study session", BadgeCategory.SESSIONS, 1),
    _badge("sessions_10", "Regular", "📖", "Complete 10 study sessions", BadgeCategory.SESSIONS, 10),
    _badge("sessions_50", "Committed", "🔰", "Complete 50 study sessions", BadgeCategory.SESSIONS, 50),
    _badge("sessions_100", "Centurion", "🛡️", "Complete 100 study sessions", BadgeCategory.SESSIONS, 100),

    # ── Special ────────────────────────────────────────────
    _badge("early_bird", "Early Bird", "🌅", "Study before 6 AM", BadgeCategory.SPECIAL, 1),
    _badge("night_owl", "Night Owl", "🦉", "Study after 11 PM", BadgeCategory.SPECIAL, 1),
    _badge("weekend_warrior", "Weekend Warrior", "🗓️", "Study on both Saturday and Sunday", BadgeCategory.SPECIAL, 1),
    _badge("perfect_week", "Perfect Week", "💯", "Study every day for a week", BadgeCategory.SPECIAL, 7),
)

_BY_ID: dict[str, Badge] = {b.id: b for b in BADGES}


def get_badge_by_id(badge_id: str) -> Badge | None:
    return _BY_ID.get(badge_id)


def get_badges_by_category(category: BadgeCategory) -> list[Badge]:
    return [b for b in BADGES if b.category == category]
