"""Terminal front end for the picker."""

from kai.ui.picker import drive, run_picker

__all__ = ["drive", "run_picker"]
