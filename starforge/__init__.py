"""starforge: procedural star-system generation with a re-runnable physics pipeline."""

__version__ = "0.1.0"
