from collections import OrderedDict
from typing import Any, Optional

from ape.utils import ZERO_ADDRESS

from delnorte_deployment.exceptions import DeploymentAborted


def _ask(question: str, contract_name: Optional[str] = None) -> None:
    """Anything but an explicit 'n' goes ahead."""
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() == "n":
        raise DeploymentAborted("Declined at the confirmation prompt.", contract_name=contract_name)


def _continue() -> None:
    _ask("Continue")


def _contains_zero_address(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        return any(_contains_zero_address(v) for v in value)
    return value == ZERO_ADDRESS


def _confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """
    Shows the resolved constructor parameters of a contract and asks
    before it is deployed. A zero address among them needs a second yes.
    """
    if resolved_params:
        print(f"\nConstructor parameters for {contract_name}")
        for name, resolved_value in resolved_params.items():
            print(f"\t{name}={resolved_value}")
    else:
        print(f"\n(i) No constructor parameters for {contract_name}")

    _ask(f"Deploy {contract_name}", contract_name=contract_name)
    if _contains_zero_address(list(resolved_params.values())):
        _ask("Zero address among the parameters; continue", contract_name=contract_name)
