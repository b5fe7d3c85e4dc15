"""Static metadata describing the birthday site."""

APP_NAME = "Birthday Pages"
APP_VERSION = "0.1.0"
APP_ABOUT_TEXT = (
    "A small invitation site with a guest icebreaker: invitees log in, answer "
    "prompt questions about other guests, and compare notes on a leaderboard."
)

DEFAULT_INVITATION_MARKDOWN = (
    "# You're invited!\n\n"
    "Come celebrate with us. Log in as a guest to play the icebreaker and "
    "find out who knows the others best."
)
