import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, List, NamedTuple, Optional

from ape.api import AccountAPI
from ape.cli.choices import select_account
from ape.contracts import ContractContainer, ContractInstance
from ape.exceptions import ApeException
from ape_accounts import KeyfileAccount
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from web3 import Web3

from delnorte_deployment.confirm import _confirm_resolution
from delnorte_deployment.exceptions import DeploymentFailure, InvalidConstructorArguments

w3 = Web3()


class DeployedInstance(NamedTuple):
    """A contract instance whose deployment transaction has been confirmed."""

    name: str
    address: ChecksumAddress
    chain_id: Optional[int] = None
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    deployer: Optional[ChecksumAddress] = None
    abi: Optional[List[dict]] = None


def _named_args(
    args: typing.Sequence[Any], param_names: Optional[typing.Sequence[str]]
) -> OrderedDict:
    if param_names is None:
        return OrderedDict((f"[{i}]", arg) for i, arg in enumerate(args))
    return OrderedDict(zip(param_names, args))


def _check_constructor_args(
    contract_name: str,
    abi_inputs: List[Any],
    named_args: OrderedDict,
    check_names: bool = True,
) -> None:
    """Checks arity, parameter names and ABI encodability of a step's resolved arguments."""

    def invalid(message: str) -> InvalidConstructorArguments:
        return InvalidConstructorArguments(message, contract_name=contract_name)

    if len(named_args) != len(abi_inputs):
        raise invalid(
            f"{contract_name} takes {len(abi_inputs)} constructor argument(s), "
            f"{len(named_args)} given (length mismatch)."
        )

    for position, (abi_input, (name, value)) in enumerate(zip(abi_inputs, named_args.items())):
        if check_names and abi_input.name != name:
            raise invalid(
                f"{contract_name} argument '{name}' at position {position} does not "
                f"match the expected ABI name '{abi_input.name}'."
            )
        if not w3.is_encodable(abi_input.type, value):
            raise invalid(
                f"{contract_name} argument '{name}' at position {position} has a value "
                f"'{value}' that does not match expected ABI type '{abi_input.type}'."
            )


class DeployerService(ABC):
    """Submits a deployment and blocks until it is confirmed on the ledger."""

    @property
    def address(self) -> Optional[str]:
        """Address of the deploying account, if there is one."""
        return None

    @abstractmethod
    def deploy(
        self,
        artifact: Any,
        args: typing.Sequence[Any],
        param_names: Optional[typing.Sequence[str]] = None,
    ) -> DeployedInstance:
        raise NotImplementedError


def _instance_from_ape(contract_name: str, contract_instance: ContractInstance) -> DeployedInstance:
    receipt = contract_instance.receipt
    abi = [entry.model_dump(mode="json") for entry in contract_instance.contract_type.abi]
    return DeployedInstance(
        name=contract_name,
        address=to_checksum_address(contract_instance.address),
        chain_id=receipt.chain_id,
        tx_hash=receipt.txn_hash,
        block_number=receipt.block_number,
        deployer=receipt.transaction.sender,
        abi=abi,
    )


class ApeDeployerService(DeployerService):
    """
    Deploys through an ape account.

    Arguments are checked against the constructor ABI and, unless autosign is
    on, confirmed at the prompt before anything is submitted.
    """

    def __init__(
        self,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
        publish: bool = False,
        required_confirmations: Optional[int] = None,
    ):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        if isinstance(self._account, KeyfileAccount):
            self._account.set_autosign(autosign)
        self.publish = publish
        self.required_confirmations = required_confirmations

    @property
    def address(self) -> str:
        return self._account.address

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        kwargs = {"publish": self.publish}
        if self.required_confirmations is not None:
            kwargs["required_confirmations"] = self.required_confirmations
        return kwargs

    def deploy(
        self,
        artifact: ContractContainer,
        args: typing.Sequence[Any],
        param_names: Optional[typing.Sequence[str]] = None,
    ) -> DeployedInstance:
        contract_name = artifact.contract_type.name
        named_args = _named_args(args, param_names)
        _check_constructor_args(
            contract_name=contract_name,
            abi_inputs=artifact.constructor.abi.inputs,
            named_args=named_args,
            check_names=param_names is not None,
        )
        if not self._autosign:
            _confirm_resolution(named_args, contract_name)

        try:
            contract_instance = self._account.deploy(artifact, *args, **self._get_kwargs())
        except ApeException as e:
            raise DeploymentFailure(
                f"Deployment of {contract_name} failed: {e}", contract_name=contract_name
            ) from e

        try:
            return _instance_from_ape(contract_name, contract_instance)
        except ApeException as e:
            raise DeploymentFailure(
                f"{contract_name} was submitted to {contract_instance.address} "
                f"but its receipt could not be read: {e}",
                contract_name=contract_name,
                address=contract_instance.address,
            ) from e
