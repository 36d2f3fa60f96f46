import typing
from pathlib import Path
from typing import List, Optional

from ape import networks
from ape.api import AccountAPI

from delnorte_deployment.confirm import _continue
from delnorte_deployment.contract_registry import ApeContractRegistry, ContractRegistry
from delnorte_deployment.deployer import ApeDeployerService, DeployedInstance, DeployerService
from delnorte_deployment.exceptions import DeploymentFailure, OrchestrationError
from delnorte_deployment.orchestrator import Orchestrator
from delnorte_deployment.plan import DeploymentPlan
from delnorte_deployment.registry import write_record
from delnorte_deployment.utils import (
    _load_yaml,
    check_plugins,
    get_required_confirmations,
    validate_config,
)


class Deployment:
    """
    A validated deployment file bound to a registry and a deployer service,
    plus the bookkeeping around a run: the deployment record and, on failure,
    the partial record.
    """

    def __init__(
        self,
        config: typing.Dict,
        path: Path,
        verify: bool = False,
        account: Optional[AccountAPI] = None,
        autosign: bool = False,
        confirmations: Optional[int] = None,
        registry: Optional[ContractRegistry] = None,
        deployer: Optional[DeployerService] = None,
    ):
        check_plugins(verify=verify)
        self.path = path
        self.config = config
        self.verify = verify
        self.registry_filepath = validate_config(config=self.config)

        self.plan = DeploymentPlan.from_config(self.config)
        if self.plan.name is None:
            self.plan.name = path.stem

        if confirmations is None:
            confirmations = get_required_confirmations(self.config)
        if deployer is None:
            deployer = ApeDeployerService(
                account=account,
                autosign=autosign,
                publish=verify,
                required_confirmations=confirmations,
            )
        self.deployer = deployer
        self.orchestrator = Orchestrator(
            registry=registry or ApeContractRegistry(), deployer=deployer
        )

        self._print_deployment_info()
        if not autosign:
            # Confirms the start of the deployment.
            _continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployment":
        config = _load_yaml(filepath)
        return cls(config=config, path=filepath, *args, **kwargs)

    def run(self) -> List[DeployedInstance]:
        try:
            deployments = self.orchestrator.run(self.plan)
        except OrchestrationError as e:
            print(f"\n(!) Deployment aborted at {e.contract_name or 'plan validation'}: {e}")
            if isinstance(e, DeploymentFailure) and e.address:
                print(f"(!) {e.contract_name} may be live at {e.address}; it is not recorded.")
            self.report_partial()
            raise

        self.finalize(deployments=deployments)
        return deployments

    def finalize(self, deployments: List[DeployedInstance]) -> Optional[Path]:
        """Publishes the deployments to the deployment record."""
        return write_record(deployments, self.registry_filepath)

    def report_partial(self) -> Optional[Path]:
        deployments = self.orchestrator.deployments
        if not deployments:
            print("(i) Nothing was deployed.")
            return None

        print("(i) Already deployed (not rolled back):")
        for instance in deployments:
            print(f"\t{instance.name} at {instance.address}")
        return write_record(deployments, self.registry_filepath, partial=True)

    def _print_deployment_info(self):
        print(
            f"Account: {self.deployer.address}",
            f"Plan: {self.plan.name} "
            f"({len(self.plan.enabled_steps)}/{len(self.plan)} steps enabled)",
            f"Config: {self.path}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {networks.provider.network.name}",
            f"Chain ID: {networks.provider.network.chain_id}",
            sep="\n",
        )
