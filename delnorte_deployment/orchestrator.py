from collections import OrderedDict
from typing import Dict, List

from delnorte_deployment.contract_registry import ContractRegistry
from delnorte_deployment.deployer import DeployedInstance, DeployerService
from delnorte_deployment.params import ResolutionContext, resolve_params
from delnorte_deployment.plan import ContractSpec, DeploymentPlan


class Orchestrator:
    """
    Executes the enabled steps of a deployment plan, one at a time, in order.

    Addresses of the instances deployed so far are threaded into the
    constructor arguments of later steps. The first error aborts the run;
    what was deployed before it stays in `deployments`.
    """

    def __init__(self, registry: ContractRegistry, deployer: DeployerService):
        self.registry = registry
        self.deployer = deployer
        self.deployments: List[DeployedInstance] = list()
        self.skipped: List[str] = list()

    def run(self, plan: DeploymentPlan) -> List[DeployedInstance]:
        plan.validate()
        self.deployments = list()
        self.skipped = list()

        deployed: Dict[str, DeployedInstance] = OrderedDict()
        total = len(plan)
        for position, step in enumerate(plan, start=1):
            if not step.enabled:
                print(f"[{position}/{total}] Skipping {step.name} (disabled)")
                self.skipped.append(step.name)
                continue

            print(f"[{position}/{total}] Deploying {step.name}")
            instance = self._deploy_step(step, deployed)
            deployed[step.name] = instance
            self.deployments.append(instance)
            print(f"[{position}/{total}] {step.name} deployed to {instance.address}")

        print(f"\n(i) Deployed {len(self.deployments)} contract(s), skipped {len(self.skipped)}.")
        return list(self.deployments)

    def _deploy_step(
        self, step: ContractSpec, deployed: Dict[str, DeployedInstance]
    ) -> DeployedInstance:
        context = ResolutionContext(deployments=deployed, deployer_address=self.deployer.address)
        args = resolve_params(step.args, context)
        artifact = self.registry.resolve(step.name)
        return self.deployer.deploy(artifact, args, param_names=step.param_names)
