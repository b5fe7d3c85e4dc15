"""Cookie and session constants shared by the login routes and the auth gate."""

AUTH_COOKIE_KEY: str = "birthday_auth"
GUEST_COOKIE_KEY: str = "birthday_guest"
AUTH_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 30
SESSION_ALGORITHM: str = "HS256"

DEFAULT_LOGIN_REDIRECT: str = "/"
DEFAULT_GUEST_REDIRECT: str = "/icebreaker"
