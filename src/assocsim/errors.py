"""
Exception types raised by the pipeline.
"""


class ConfigurationError(ValueError):
    """Invalid scenario or stage parameters, detected before sampling."""


class ContractViolation(ValueError):
    """Data handed to an external collaborator does not meet its preconditions."""


class BackendError(RuntimeError):
    """An external collaborator failed to run or returned unusable output."""
