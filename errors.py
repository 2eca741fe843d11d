class LedgerError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(LedgerError):
    status_code = 404


class InvalidArgument(LedgerError):
    status_code = 400


class StoreUnavailable(LedgerError):
    status_code = 503
