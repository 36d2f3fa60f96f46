import itertools
from typing import NamedTuple

import pytest

from delnorte_deployment.contract_registry import ContractRegistry
from delnorte_deployment.deployer import DeployedInstance, DeployerService
from delnorte_deployment.exceptions import DeploymentFailure, RegistryLookupError
from delnorte_deployment.orchestrator import Orchestrator

# Common constants
CHAIN_ID = 1337
DEPLOYER_ADDRESS = "0x" + "12" * 20
ADDRESS_A = "0x73A597834A0637BbB2bf033dd60B70b42f53De9B"
ADDRESS_B = "0xFFc48E37296e2b6E2e7513729901D19AC9aD45cC"

DELNORTE_CONTRACTS = [
    "DelnorteProperties",
    "DelnorteFractionalizer",
    "dUSDT",
    "DelnorteStaking",
]


class FakeArtifact(NamedTuple):
    name: str


class FakeContractRegistry(ContractRegistry):
    def __init__(self, names):
        self.names = set(names)
        self.lookups = list()

    def resolve(self, name):
        self.lookups.append(name)
        if name not in self.names:
            raise RegistryLookupError(f"No contract artifact found for {name}", contract_name=name)
        return FakeArtifact(name)


class FakeDeployerService(DeployerService):
    """Hands out sequential addresses; fails on demand."""

    def __init__(self, fail_on=(), address=DEPLOYER_ADDRESS):
        self.calls = list()
        self.fail_on = set(fail_on)
        self._address = address
        self._addresses = (f"0x{n:040x}" for n in itertools.count(1))

    @property
    def address(self):
        return self._address

    def deploy(self, artifact, args, param_names=None):
        self.calls.append((artifact.name, list(args), param_names))
        if artifact.name in self.fail_on:
            raise DeploymentFailure(
                f"Deployment of {artifact.name} failed: confirmation timed out",
                contract_name=artifact.name,
            )
        block_number = len(self.calls)
        return DeployedInstance(
            name=artifact.name,
            address=next(self._addresses),
            chain_id=CHAIN_ID,
            tx_hash=f"0x{block_number:064x}",
            block_number=block_number,
            deployer=self._address,
            abi=[{"type": "constructor", "inputs": []}],
        )


# Fixtures
@pytest.fixture
def contract_registry():
    return FakeContractRegistry(DELNORTE_CONTRACTS)


@pytest.fixture
def deployer():
    return FakeDeployerService()


@pytest.fixture
def orchestrator(contract_registry, deployer):
    return Orchestrator(registry=contract_registry, deployer=deployer)
