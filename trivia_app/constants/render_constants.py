"""Text and emoji used when building render-ready payloads."""

EMOJI_CROWN: str = "\N{CROWN}"
EMOJI_CORRECT: str = "\N{WHITE HEAVY CHECK MARK}"
EMOJI_WRONG: str = "\N{CROSS MARK}"
EMOJI_STATS: str = "\N{BAR CHART}"
EMOJI_CATEGORY: str = "\N{BOOKS}"
MEDALS: tuple[str, ...] = ("\N{TROPHY}", "\N{SECOND PLACE MEDAL}", "\N{THIRD PLACE MEDAL}")
UNRANKED_MARK: str = "\N{BULLET}"

QUESTION_TITLE: str = f"{EMOJI_CATEGORY} NightTrivia Question"
RESULTS_TITLE: str = f"{EMOJI_STATS} Question Results"
LEADERBOARD_TITLE: str = f"{EMOJI_CROWN} NightTrivia Leaderboard"
LEADERBOARD_FOOTER_TEMPLATE: str = "Page {page}/{total_pages} \N{BULLET} {total_players} Total Players"
QUESTION_FOOTER_TEMPLATE: str = "Answer within {window_hours:g} hours \N{BULLET} Earlier answers = More points!"
NO_ANSWERS_TEXT: str = "No answers received"

DUPLICATE_VOTE_MESSAGE: str = f"{EMOJI_WRONG} You've already answered!"
ROUND_NOT_OPEN_MESSAGE: str = f"{EMOJI_WRONG} This question has ended!"

VOTE_MESSAGES: tuple[str, ...] = (
    "locked in their answer",
    "is ready to rumble",
    "jumped into action",
    "made their choice",
    "took their shot",
    "stepped up to the plate",
    "showed their knowledge",
    "threw their hat in the ring",
    "entered the arena",
    "made their move",
    "took a chance",
    "put their knowledge to the test",
    "joined the challenge",
    "accepted the challenge",
    "made their play",
    "stepped into the spotlight",
    "gave it their best shot",
    "rose to the occasion",
    "answered the call",
    "made their mark",
)
