class FeedBuildError(Exception):
    """Base class for everything the feed build raises on purpose."""


class InvalidRange(FeedBuildError):
    pass


class WindowTooFarAhead(FeedBuildError):
    pass


class FetchFailure(FeedBuildError):
    pass


class FetchTimeout(FetchFailure):
    pass


class TaskExhausted(FetchFailure):
    """All attempts for one task failed. Logged, never raised out of a batch."""


class TransformError(FeedBuildError):
    pass
