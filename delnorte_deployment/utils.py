import importlib
import os
import typing
from pathlib import Path
from typing import Dict

import yaml
from ape import networks

from delnorte_deployment.constants import ARTIFACTS_DIR
from delnorte_deployment.exceptions import DeploymentConfigError
from delnorte_deployment.networks import is_local_network
from delnorte_deployment.registry import recorded_chain_ids


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _deployment_section(config: Dict) -> Dict:
    section = config.get("deployment")
    if not isinstance(section, dict):
        raise DeploymentConfigError("Deployment file has no 'deployment' section.")
    return section


def get_chain_id(config: Dict) -> int:
    chain_id = _deployment_section(config).get("chain_id")
    if chain_id is None:
        raise DeploymentConfigError("Deployment file has no 'deployment.chain_id'.")
    try:
        return int(chain_id)
    except (TypeError, ValueError):
        raise DeploymentConfigError(f"Invalid chain_id {chain_id!r} in deployment file.")


def get_record_filepath(config: Dict) -> Path:
    """Where the deployment record of this plan lives."""
    section = config.get("artifacts") or dict()
    filename = section.get("filename")
    if not filename:
        raise DeploymentConfigError("Deployment file has no 'artifacts.filename'.")
    return Path(section.get("dir", ARTIFACTS_DIR)) / filename


def get_required_confirmations(config: Dict) -> typing.Optional[int]:
    confirmations = _deployment_section(config).get("confirmations")
    if confirmations is None:
        return None
    try:
        confirmations = int(confirmations)
    except (TypeError, ValueError):
        confirmations = -1
    if confirmations < 0:
        raise DeploymentConfigError("'deployment.confirmations' must be a non-negative integer.")
    return confirmations


def check_network(chain_id: int) -> None:
    """Live deployments must target the chain the provider is connected to."""
    network = networks.provider.network
    if is_local_network() or network.chain_id == chain_id:
        return
    raise DeploymentConfigError(
        f"Deployment file targets chain {chain_id}, but {network.ecosystem.name}:"
        f"{network.name} is chain {network.chain_id}."
    )


def validate_config(config: Dict) -> Path:
    """
    Checks the deployment file against the connected network and returns the
    path of its deployment record. A chain that is already recorded there is
    never deployed to again.
    """
    print("Validating deployment file...")
    chain_id = get_chain_id(config)
    check_network(chain_id)

    record_filepath = get_record_filepath(config)
    if chain_id in recorded_chain_ids(record_filepath):
        raise DeploymentConfigError(
            f"{record_filepath} already records a deployment on chain {chain_id}."
        )
    return record_filepath


def _require_plugin(module_name: str, purpose: str):
    plugin = module_name.split(".")[0].replace("_", "-")
    try:
        return importlib.import_module(module_name)
    except ImportError:
        raise ImportError(f"Please install the {plugin} plugin to {purpose}.")


def check_plugins(verify: bool) -> None:
    """Checks the ape plugins, and their API keys, a live deployment relies on."""
    if is_local_network():
        return
    print("Checking plugins...")

    if verify:
        etherscan = _require_plugin("ape_etherscan.utils", "publish contracts")
        ecosystem = networks.provider.network.ecosystem.name
        envvar = etherscan.API_KEY_ENV_KEY_MAP.get(ecosystem)
        if not envvar or not os.environ.get(envvar):
            raise DeploymentConfigError(
                f"No explorer API key for {ecosystem}; set {envvar or 'a supported explorer key'}."
            )

    if networks.provider.name == "infura":
        infura = _require_plugin("ape_infura.provider", "deploy through infura")
        envvars = infura._ENVIRONMENT_VARIABLE_NAMES
        if not any(os.environ.get(envvar) for envvar in envvars):
            raise DeploymentConfigError(
                f"No Infura API key found in environment variables: {', '.join(envvars)}"
            )
