# feeds/errors.py


class FeedError(Exception):
    """The catalog feed could not be retrieved."""
