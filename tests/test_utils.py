from pathlib import Path

import pytest

from delnorte_deployment import utils
from delnorte_deployment.constants import ARTIFACTS_DIR
from delnorte_deployment.deployer import DeployedInstance
from delnorte_deployment.exceptions import DeploymentConfigError
from delnorte_deployment.registry import write_record


def _config(tmp_path, **deployment):
    return {
        "deployment": {"chain_id": 80001, **deployment},
        "artifacts": {"dir": str(tmp_path), "filename": "staking.json"},
        "contracts": ["DelnorteStaking"],
    }


def test_get_chain_id(tmp_path):
    assert utils.get_chain_id(_config(tmp_path)) == 80001
    assert utils.get_chain_id({"deployment": {"chain_id": "137"}}) == 137


@pytest.mark.parametrize(
    "config", [{}, {"deployment": None}, {"deployment": {}}, {"deployment": {"chain_id": "x"}}]
)
def test_get_chain_id_rejects(config):
    with pytest.raises(DeploymentConfigError):
        utils.get_chain_id(config)


def test_get_record_filepath(tmp_path):
    assert utils.get_record_filepath(_config(tmp_path)) == tmp_path / "staking.json"
    default = utils.get_record_filepath({"artifacts": {"filename": "full.json"}})
    assert default == Path(ARTIFACTS_DIR) / "full.json"
    with pytest.raises(DeploymentConfigError, match="filename"):
        utils.get_record_filepath({})


def test_get_required_confirmations(tmp_path):
    assert utils.get_required_confirmations(_config(tmp_path)) is None
    assert utils.get_required_confirmations(_config(tmp_path, confirmations=3)) == 3
    for confirmations in (-1, "many"):
        with pytest.raises(DeploymentConfigError):
            utils.get_required_confirmations(_config(tmp_path, confirmations=confirmations))


def test_validate_config_refuses_recorded_chain(tmp_path, monkeypatch):
    monkeypatch.setattr(utils, "check_network", lambda chain_id: None)
    config = _config(tmp_path)
    assert utils.validate_config(config) == tmp_path / "staking.json"

    instance = DeployedInstance(name="DelnorteStaking", address="0x" + "01" * 20, chain_id=80001)
    write_record([instance], tmp_path / "staking.json")

    with pytest.raises(DeploymentConfigError, match="chain 80001"):
        utils.validate_config(config)


def test_validate_config_ignores_partial_record(tmp_path, monkeypatch):
    monkeypatch.setattr(utils, "check_network", lambda chain_id: None)
    instance = DeployedInstance(name="DelnorteStaking", address="0x" + "01" * 20, chain_id=80001)
    write_record([instance], tmp_path / "staking.json", partial=True)

    assert utils.validate_config(_config(tmp_path)) == tmp_path / "staking.json"
