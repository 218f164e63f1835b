from review_bot.github.app_auth import GitHubAppAuth
from review_bot.github.client import ExistingComment, GitHubClient

__all__ = ["GitHubAppAuth", "GitHubClient", "ExistingComment"]
