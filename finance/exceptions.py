"""Domain errors raised by the finance services and mapped to HTTP at the view layer."""


class FinanceError(Exception):
    status_code = 400
    default_message = "Finance operation failed"

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class TemplateNotFound(FinanceError):
    status_code = 404
    default_message = "Recurring template not found"


class AlreadyPaid(FinanceError):
    status_code = 409
    default_message = "Obligation already paid for this month"


class ConcurrentExecution(FinanceError):
    status_code = 409
    default_message = "Recurring template was executed concurrently"
