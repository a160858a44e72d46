"""LoadTest models, defaulting, a REST client and a defaults-file generator."""

__version__ = "0.1.0"

__all__ = ["clientset", "configure", "constants", "defaults", "types"]