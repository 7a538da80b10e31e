"""Domain exceptions raised by the service layer."""


class UserNotFoundError(LookupError):
    pass


class UsernameTakenError(ValueError):
    pass


class InterviewNotFoundError(LookupError):
    """No ongoing interview matches the request."""


class InterviewAlreadyStartedError(ValueError):
    pass


class InsufficientCreditsError(ValueError):
    pass


class OrderNotFoundError(LookupError):
    pass


class OrderAlreadyCompletedError(ValueError):
    pass


class PaymentIncompleteError(ValueError):
    pass


class UnsupportedFileTypeError(ValueError):
    pass


class FileProcessingError(RuntimeError):
    pass
