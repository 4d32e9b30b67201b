"""daylog: sync and streak engines for a personal daily-habit journal."""

__version__ = "0.1.0"
