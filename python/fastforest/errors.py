"""
Exceptions raised by the random forest configuration layer.
"""


class ForestError(Exception):
    """Base error for the fastforest library."""


class ContractViolation(ForestError):
    """Raised when a call breaks the contract of the called function."""


class PreconditionViolation(ContractViolation):
    """Raised when the arguments or the state of the receiver are not acceptable for a call."""


def precondition(condition, message):
    if not condition:
        raise PreconditionViolation(message)
