"""Key names used in the key-value store."""

GUESTS_KEY: str = "guests"
QUESTIONS_KEY: str = "questions"
GUEST_STATE_PREFIX: str = "guest-state:"

DEFAULT_WRITE_RETRIES: int = 5


def guest_state_key(guest_name: str) -> str:
    return f"{GUEST_STATE_PREFIX}{guest_name}"
