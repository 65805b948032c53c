"""orgtracker - deadline-driven task tree tracker."""

__version__ = "0.1.0"
