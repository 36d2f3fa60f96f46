import typing
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from delnorte_deployment.exceptions import DeploymentConfigError, UnresolvedReferenceError
from delnorte_deployment.params import VariableContext, process_raw_values, references
from delnorte_deployment.utils import _load_yaml

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"
CONTRACT_ENABLED_KEY = "enabled"
CONTRACT_KEYS = {CONTRACT_CONSTRUCTOR_PARAMETER_KEY, CONTRACT_ENABLED_KEY}


class ContractSpec(NamedTuple):
    """A single deployment step: which contract, with which constructor arguments."""

    name: str
    args: Tuple[Any, ...] = ()
    enabled: bool = True
    # constructor parameter names, when the arguments were authored by name
    param_names: Optional[Tuple[str, ...]] = None


def _spec_from_config(contract_info: Any) -> ContractSpec:
    if isinstance(contract_info, str):
        return ContractSpec(name=contract_info)

    if not isinstance(contract_info, dict) or len(contract_info) != 1:
        raise DeploymentPlan.Invalid("Malformed contracts entry in deployment YAML.")

    contract_name = list(contract_info.keys())[0]  # only one entry
    contract_data = contract_info[contract_name] or dict()
    if not isinstance(contract_data, dict):
        raise DeploymentPlan.Invalid(f"Malformed deployment config for {contract_name}.")

    unknown_keys = set(contract_data) - CONTRACT_KEYS
    if unknown_keys:
        raise DeploymentPlan.Invalid(
            f"Unexpected key(s) {', '.join(sorted(unknown_keys))} for {contract_name}."
        )

    enabled = contract_data.get(CONTRACT_ENABLED_KEY, True)
    if not isinstance(enabled, bool):
        raise DeploymentPlan.Invalid(
            f"'{CONTRACT_ENABLED_KEY}' of {contract_name} must be a boolean."
        )

    constructor_data = contract_data.get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY) or list()
    if isinstance(constructor_data, dict):
        param_names = tuple(constructor_data.keys())
        args = tuple(constructor_data.values())
    elif isinstance(constructor_data, list):
        param_names = None
        args = tuple(constructor_data)
    else:
        raise DeploymentPlan.Invalid(f"Malformed constructor parameters for {contract_name}.")

    return ContractSpec(name=contract_name, args=args, enabled=enabled, param_names=param_names)


class DeploymentPlan:
    """
    An ordered sequence of contract deployments.

    Steps can be disabled without being removed, and constructor arguments
    may only reference contracts deployed by earlier, enabled steps.
    """

    class Invalid(DeploymentConfigError):
        """Raised when the plan is structurally malformed"""

    def __init__(
        self,
        steps: typing.Sequence[ContractSpec],
        name: Optional[str] = None,
        constants: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.constants = dict(constants or dict())
        self.steps = self._process_steps(steps)

    @classmethod
    def from_config(cls, config: typing.Dict) -> "DeploymentPlan":
        """Builds a plan from a loaded deployment YAML."""
        contracts = config.get("contracts")
        if not contracts:
            raise cls.Invalid("Deployment file missing 'contracts' field.")
        if not isinstance(contracts, list):
            raise cls.Invalid("'contracts' must be an ordered list.")

        constants = config.get("constants") or dict()
        name = (config.get("deployment") or dict()).get("name")
        steps = [_spec_from_config(contract_info) for contract_info in contracts]
        return cls(steps=steps, name=name, constants=constants)

    @classmethod
    def from_yaml(cls, filepath: Path) -> "DeploymentPlan":
        config = _load_yaml(filepath)
        plan = cls.from_config(config)
        if plan.name is None:
            plan.name = filepath.stem
        return plan

    def _process_steps(self, steps: typing.Sequence[ContractSpec]) -> Tuple[ContractSpec, ...]:
        contract_names = [step.name for step in steps]
        processed = list()
        preceding = OrderedDict()
        for step in steps:
            if not isinstance(step.name, str) or not step.name:
                raise self.Invalid(f"Invalid contract name {step.name!r}.")
            if step.name in preceding:
                raise self.Invalid(
                    f"{step.name} appears more than once in the plan; "
                    "references to it would be ambiguous."
                )
            if step.param_names is not None and len(step.param_names) != len(step.args):
                raise self.Invalid(f"Constructor parameter names of {step.name} do not match args.")

            context = VariableContext(
                contract_name=step.name,
                preceding=OrderedDict(preceding),
                contract_names=contract_names,
                constants=self.constants,
                enabled=step.enabled,
            )
            args = tuple(process_raw_values(step.args, context))
            processed.append(step._replace(args=args))
            preceding[step.name] = step.enabled

        return tuple(processed)

    def validate(self) -> None:
        """
        Checks that every reference of an enabled step points strictly backward,
        at an enabled step.
        """
        seen: Dict[str, bool] = dict()
        for step in self.steps:
            if step.enabled:
                for reference in references(list(step.args)):
                    if not seen.get(reference, False):
                        raise UnresolvedReferenceError(
                            f"{step.name} references {reference}, which is not deployed before it",
                            contract_name=step.name,
                            reference=reference,
                        )
            seen[step.name] = step.enabled

    @property
    def enabled_steps(self) -> List[ContractSpec]:
        return [step for step in self.steps if step.enabled]

    @property
    def contract_names(self) -> List[str]:
        return [step.name for step in self.steps]

    def __iter__(self) -> Iterator[ContractSpec]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self):
        enabled = len(self.enabled_steps)
        return f"DeploymentPlan(name={self.name!r}, steps={len(self)}, enabled={enabled})"
