import typing
from abc import ABC, abstractmethod
from typing import Any, Dict, List, NamedTuple, Optional

from ape.utils import ZERO_ADDRESS

from delnorte_deployment.exceptions import DeploymentConfigError, UnresolvedReferenceError


class VariableContext:
    """What a step is allowed to see while its raw constructor values are processed."""

    def __init__(
        self,
        contract_name: str,
        preceding: typing.Dict[str, bool],
        contract_names: List[str],
        constants: typing.Dict[str, Any] = None,
        enabled: bool = True,
    ):
        self.contract_name = contract_name
        # name -> enabled, for every step before this one
        self.preceding = preceding or dict()
        self.contract_names = contract_names or list()
        self.constants = constants or dict()
        self.enabled = enabled


class ResolutionContext(NamedTuple):
    """Run-time state available when a step's arguments are resolved."""

    deployments: Dict[str, Any]
    deployer_address: Optional[str] = None


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, context: ResolutionContext) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        result = isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)
        return result


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is the special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self, context: ResolutionContext) -> Any:
        if context.deployer_address is None:
            return ZERO_ADDRESS
        return context.deployer_address

    def __repr__(self):
        return f"{self.VARIABLE_PREFIX}{self.DEPLOYER_INDICATOR}"


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise DeploymentConfigError(
                f"Constant '{constant_name}' used by {context.contract_name} "
                "not found in deployment file."
            )
        self.constant_name = constant_name

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self, context: ResolutionContext) -> Any:
        return self.constant_value

    def __repr__(self):
        return f"{self.VARIABLE_PREFIX}{self.constant_name}"


class ContractReference(Variable):
    """The address of a contract deployed by an earlier step of the same plan."""

    def __init__(self, contract_name: str, context: VariableContext):
        owner = context.contract_name
        if contract_name not in context.contract_names:
            raise UnresolvedReferenceError(
                f"{owner} references {contract_name}, which is not part of the plan",
                contract_name=owner,
                reference=contract_name,
            )
        if contract_name not in context.preceding:
            raise UnresolvedReferenceError(
                f"{owner} references {contract_name}, which is not deployed before it",
                contract_name=owner,
                reference=contract_name,
            )
        # disabled steps may keep referencing each other; they never run
        if context.enabled and not context.preceding[contract_name]:
            raise UnresolvedReferenceError(
                f"{owner} references {contract_name}, which is disabled in this plan",
                contract_name=owner,
                reference=contract_name,
            )

        self.contract_name = contract_name
        self.owner = owner

    def resolve(self, context: ResolutionContext) -> Any:
        """Resolves a contract address."""
        try:
            instance = context.deployments[self.contract_name]
        except KeyError:
            raise UnresolvedReferenceError(
                f"{self.owner} references {self.contract_name}, which has not been deployed",
                contract_name=self.owner,
                reference=self.contract_name,
            )
        return instance.address

    def __repr__(self):
        return f"{self.VARIABLE_PREFIX}{self.contract_name}"


def _resolve_param(value: Any, context: ResolutionContext) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v, context) for v in value]

    if isinstance(value, Variable):
        return value.resolve(context)

    return value  # literally a value


def resolve_params(values: typing.Sequence[Any], context: ResolutionContext) -> List[Any]:
    """Resolves the ordered constructor arguments of a single step."""
    return [_resolve_param(value, context) for value in values]


def _variable_from_value(variable: Any, context: VariableContext) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount()
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    else:
        return ContractReference(variable, context)


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def process_raw_values(
    values: typing.Sequence[Any], variable_context: VariableContext
) -> List[Any]:
    """Turns `$` prefixed strings of a step's raw arguments into variables."""
    return [_process_raw_value(value, variable_context) for value in values]


def references(value: Any) -> List[str]:
    """Returns the names of all contracts referenced by a (possibly nested) value."""
    if isinstance(value, (list, tuple)):
        names = list()
        for v in value:
            names.extend(references(v))
        return names
    if isinstance(value, ContractReference):
        return [value.contract_name]
    return []
