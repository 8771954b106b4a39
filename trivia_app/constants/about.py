"""Static metadata describing NightTrivia."""

APP_NAME = "NightTrivia"
APP_VERSION = "1.2.6"
APP_ABOUT_TEXT = (
    "NightTrivia poses a multiple-choice question to the group every few hours. "
    "Answer once per round; earlier correct answers earn more points."
)

HELP_COMMANDS_TEXT = (
    "- stats: view your or another participant's statistics\n"
    "- leaderboard: see the global rankings\n"
    "- help: show this help message\n"
    "Admin commands\n"
    "- trivia start: start a new trivia round\n"
    "- trivia status: check the current round\n"
    "- trivia force-end: end the current round\n"
    "- points add/remove: modify participant points"
)

HELP_HOW_TO_PLAY_TEXT = (
    "1. Questions appear every {open_interval_hours} hours\n"
    "2. Pick the letter of your answer\n"
    "3. Earlier correct answers earn more points\n"
    "4. Wrong answers lose 1 point\n"
    "5. Results show after {window_hours} hours"
)
