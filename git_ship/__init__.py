"""git-ship: commit, push and open pull requests from one command."""

__version__ = "0.1.0"
