class ExplorerError(Exception):
    pass


class ValidationError(ExplorerError):
    pass


class UpstreamError(ExplorerError):
    pass


class LedgerTimeoutError(ExplorerError, TimeoutError):
    pass
