"""
The deployment record: a JSON file mapping chain ids to the contracts a plan
deployed there, with their addresses, ABIs and receipt metadata.

    {"80001": {"DelnorteStaking": {"address": ..., "abi": [...], ...}}}
"""

import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Set

from eth_utils import to_checksum_address

from delnorte_deployment.constants import PARTIAL_REGISTRY_SUFFIX, UNMERGED_REGISTRY_SUFFIX
from delnorte_deployment.deployer import DeployedInstance

# chain id -> contract name -> entry
Record = Dict[str, Dict[str, dict]]


def load_record(filepath: Path) -> Record:
    """Returns the record stored at filepath, or an empty one."""
    if not filepath.exists():
        return dict()
    with open(filepath, "r") as file:
        return json.load(file)


def recorded_chain_ids(filepath: Path) -> Set[int]:
    return {int(chain_id) for chain_id in load_record(filepath)}


def _entry(instance: DeployedInstance) -> dict:
    if instance.chain_id is None:
        raise ValueError(f"Deployed instance {instance.name} has no chain id.")
    abi = sorted(instance.abi or list(), key=lambda item: (item["type"], item.get("name", "")))
    return {
        "address": to_checksum_address(instance.address),
        "abi": abi,
        "tx_hash": instance.tx_hash,
        "block_number": instance.block_number,
        "deployer": instance.deployer,
    }


def write_record(
    deployments: List[DeployedInstance], filepath: Path, partial: bool = False
) -> Optional[Path]:
    """
    Adds the deployed instances to the record at filepath and returns where
    they were written.

    A partial record goes to `<name>.partial.json` next to the full one.
    Existing records for other chains are kept; when the file already holds
    one of these chains nothing is overwritten and the instances go to
    `<name>.unmerged.json` instead.
    """
    if not deployments:
        return None

    record: Record = defaultdict(dict)
    for instance in deployments:
        record[str(instance.chain_id)][instance.name] = _entry(instance)

    if partial:
        filepath = filepath.with_suffix(PARTIAL_REGISTRY_SUFFIX)

    existing = load_record(filepath)
    overlap = set(existing) & set(record)
    if overlap:
        filepath = filepath.with_suffix(UNMERGED_REGISTRY_SUFFIX)
        print(
            f"(!) {filepath.name}: chain id(s) {', '.join(sorted(overlap))} already recorded, "
            "not merging."
        )
    else:
        existing.update(record)
        record = existing

    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as file:
        json.dump(record, file, indent=4, sort_keys=True)

    print(f"(i) {'Partial record' if partial else 'Record'} written to {filepath}")
    return filepath
