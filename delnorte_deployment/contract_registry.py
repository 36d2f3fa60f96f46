from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ape import project
from ape.contracts import ContractContainer

from delnorte_deployment.exceptions import RegistryLookupError

ArtifactHandle = Any


class ContractRegistry(ABC):
    """Resolves a contract name to a deployable artifact."""

    @abstractmethod
    def resolve(self, name: str) -> ArtifactHandle:
        raise NotImplementedError


class ApeContractRegistry(ContractRegistry):
    """
    Looks contract containers up in the ape project, then in the project's
    dependencies. A name found in more than one dependency is ambiguous.
    """

    def __init__(self, project_manager=None):
        self._project = project if project_manager is None else project_manager
        self._containers: Dict[str, ContractContainer] = dict()

    def resolve(self, name: str) -> ContractContainer:
        if name not in self._containers:
            self._containers[name] = self._lookup(name)
        return self._containers[name]

    def _lookup(self, name: str) -> ContractContainer:
        container = getattr(self._project, name, None)
        if container is not None:
            return container

        found: List[str] = list()
        for dependency_name, versions in self._project.dependencies.items():
            for version, dependency in versions.items():
                candidate = getattr(dependency, name, None)
                if candidate is not None:
                    container = candidate
                    found.append(f"{dependency_name}@{version}")

        if not found:
            raise RegistryLookupError(
                f"No contract artifact found for {name}.", contract_name=name
            )
        if len(found) > 1:
            raise RegistryLookupError(
                f"Ambiguous contract artifact {name}: found in {', '.join(found)}.",
                contract_name=name,
            )
        return container
