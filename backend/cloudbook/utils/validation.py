from __future__ import annotations

WEAK_PASSWORDS = frozenset({"password", "12345678", "123456789", "qwertyui", "password1", "password123"})


def validate_password_strength(password: str) -> tuple[bool, str | None]:
    """Validate password strength."""
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"

    if password.lower() in WEAK_PASSWORDS:
        return False, "Password is too weak. Please choose a stronger password."
    return True, None


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Strip tags, drop blanks and duplicates while keeping first-seen order."""
    if not tags:
        return []
    normalized: list[str] = []
    for tag in tags:
        value = tag.strip() if tag else ""
        if value and value not in normalized:
            normalized.append(value)
    return normalized
