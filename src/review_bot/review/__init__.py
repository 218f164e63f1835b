from review_bot.review.diff import map_line_to_position
from review_bot.review.parser import parse_findings, parse_review_text
from review_bot.review.schemas import ChangedFile, Finding, PullRequestEvent

__all__ = [
    "map_line_to_position",
    "parse_findings",
    "parse_review_text",
    "ChangedFile",
    "Finding",
    "PullRequestEvent",
]
