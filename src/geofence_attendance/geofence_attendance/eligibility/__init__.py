from .resolver import EligibilityResolver

__all__ = ["EligibilityResolver"]
