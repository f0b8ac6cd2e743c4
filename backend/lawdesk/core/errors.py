"""
Error types surfaced to users of the law form
"""


class LawdeskError(Exception):
    """Base class for errors rendered back to the submitter"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LawdeskError):
    """Submitted form values failed a field constraint"""


class PersistenceError(LawdeskError):
    """The database rejected or could not perform the insert"""

    MESSAGE_PREFIX = "Error adding law: "

    def __init__(self, detail: str):
        super().__init__(f"{self.MESSAGE_PREFIX}{detail}")
        self.detail = detail
