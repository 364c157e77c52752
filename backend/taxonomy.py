"""Suggested categories, moods and tags offered to the journal UI.

These are suggestions only; entries may carry any string.
"""
from typing import Optional

ENTRY_CATEGORIES = [
    "Family",
    "Work",
    "Personal Growth",
    "Reflection",
    "Health",
    "Travel",
    "Fitness",
    "Studies",
    "Other",
]

MOOD_GROUPS = {
    "Positive": ["Relaxed", "Grateful", "Confident", "Happy", "Excited"],
    "Neutral": ["Nostalgic", "Bored", "Calm", "Thoughtful", "Curious"],
    "Negative": ["Angry", "Stressed", "Sad", "Lonely", "Anxious"],
}

PREBUILT_TAGS = [
    "Studies", "Career", "Work", "Family", "Cooking", "Meditation", "Yoga", "Music",
    "Shopping", "Parenting", "Projects", "Planning", "Friends", "Relationships",
    "Health", "Fitness", "Personal Growth", "Self-care", "Spirituality", "Birthday",
    "Holiday", "Hobbies", "Travel", "Nature", "Finance", "Vacation", "Celebration",
    "Exercise", "Reading", "Writing", "Reflection",
]

_GROUP_BY_MOOD = {
    mood.casefold(): group for group, moods in MOOD_GROUPS.items() for mood in moods
}


def mood_group(mood: Optional[str]) -> Optional[str]:
    """Return the group a suggested mood belongs to, or None for custom moods."""
    return _GROUP_BY_MOOD.get((mood or "").strip().casefold())
