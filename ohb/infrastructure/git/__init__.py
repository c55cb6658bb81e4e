"""Git infrastructure - command-line backed commit navigation."""

from .navigator import GitCommitNavigator, git_navigator_factory

__all__ = [
    "GitCommitNavigator",
    "git_navigator_factory",
]
