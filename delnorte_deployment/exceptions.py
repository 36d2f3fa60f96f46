from typing import Optional


class OrchestrationError(Exception):
    """Base class for errors that abort a deployment plan."""

    def __init__(self, message: str, contract_name: Optional[str] = None):
        super().__init__(message)
        self.contract_name = contract_name


class RegistryLookupError(OrchestrationError):
    """Raised when a contract name cannot be resolved to a deployable artifact."""


class UnresolvedReferenceError(OrchestrationError):
    """Raised when an argument references an instance that was not (or will not be) deployed."""

    def __init__(
        self,
        message: str,
        contract_name: Optional[str] = None,
        reference: Optional[str] = None,
    ):
        super().__init__(message, contract_name=contract_name)
        self.reference = reference


class DeploymentFailure(OrchestrationError):
    """Raised when the deployer service reports a failed or timed out deployment."""

    def __init__(
        self,
        message: str,
        contract_name: Optional[str] = None,
        address: Optional[str] = None,
    ):
        super().__init__(message, contract_name=contract_name)
        # set when the contract reached the ledger but could not be confirmed
        self.address = address


class DeploymentAborted(OrchestrationError):
    """Raised when the operator declines a confirmation prompt."""


class DeploymentConfigError(ValueError):
    """Raised when a deployment file or plan is malformed."""


class InvalidConstructorArguments(OrchestrationError, DeploymentConfigError):
    """Raised when the resolved arguments of a step do not match its constructor ABI."""
