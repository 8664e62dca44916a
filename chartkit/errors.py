"""Exception hierarchy for chartkit."""


class ChartError(Exception):
    """Base class for errors raised by chartkit."""


class DataLoadError(ChartError):
    """The data source was unreachable or could not be parsed as a table."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Failed to load {source}: {reason}")
        self.source = source
        self.reason = reason


class UnknownCategoryError(ChartError, LookupError):
    """A category was looked up that the palette table does not classify."""

    def __init__(self, category):
        super().__init__(f"No colour registered for category {category!r}")
        self.category = category
