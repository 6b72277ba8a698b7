"""Core infrastructure shared by the feature modules."""
