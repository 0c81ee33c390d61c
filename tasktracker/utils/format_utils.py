"""Utilities for formatting user-facing values."""


def initials(name: str) -> str:
    """Uppercase first letter of every word: "Esha Nadeem" -> "EN"."""
    return "".join(word[0].upper() for word in name.split() if word)


def percentage(part: int, whole: int) -> float:
    """Percentage rounded to one decimal; 0.0 when `whole` is zero."""
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)
