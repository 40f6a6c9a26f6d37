"""Release and pull request tooling around Git and GitHub."""

__version__ = "0.1.0"
