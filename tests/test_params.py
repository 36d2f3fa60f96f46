from collections import OrderedDict

import pytest
from ape.utils import ZERO_ADDRESS

from delnorte_deployment.deployer import DeployedInstance
from delnorte_deployment.exceptions import UnresolvedReferenceError
from delnorte_deployment.params import (
    Constant,
    ContractReference,
    DeployerAccount,
    ResolutionContext,
    Variable,
    VariableContext,
    process_raw_values,
    references,
    resolve_params,
)

PROPERTIES_ADDRESS = "0x" + "01" * 20
DEPLOYER = "0x" + "02" * 20


@pytest.fixture
def variable_context():
    return VariableContext(
        contract_name="DelnorteStaking",
        preceding=OrderedDict(DelnorteProperties=True, dUSDT=False),
        contract_names=["DelnorteProperties", "dUSDT", "DelnorteStaking"],
        constants={"FEE": 1, "TOKEN": "0x" + "03" * 20},
    )


@pytest.fixture
def resolution_context():
    properties = DeployedInstance(name="DelnorteProperties", address=PROPERTIES_ADDRESS)
    return ResolutionContext(
        deployments={"DelnorteProperties": properties}, deployer_address=DEPLOYER
    )


def test_is_variable():
    assert Variable.is_variable("$DelnorteProperties")
    assert not Variable.is_variable("DelnorteProperties")
    assert not Variable.is_variable(18)
    assert not Variable.is_variable([])


def test_literals_pass_through(variable_context, resolution_context):
    raw = ["Delnorte Properties", "DTV", [], 18, 1, "0x73A597834A0637BbB2bf033dd60B70b42f53De9B"]
    processed = process_raw_values(raw, variable_context)
    assert processed == raw
    assert resolve_params(processed, resolution_context) == raw


def test_variables_resolve(variable_context, resolution_context):
    raw = ["$DelnorteProperties", "$FEE", "$TOKEN", "$deployer"]
    processed = process_raw_values(raw, variable_context)
    assert isinstance(processed[0], ContractReference)
    assert isinstance(processed[1], Constant)
    assert isinstance(processed[3], DeployerAccount)

    resolved = resolve_params(processed, resolution_context)
    assert resolved == [PROPERTIES_ADDRESS, 1, "0x" + "03" * 20, DEPLOYER]


def test_nested_lists_resolve_element_wise(variable_context, resolution_context):
    raw = [["$DelnorteProperties", "literal", ["$FEE"]], []]
    processed = process_raw_values(raw, variable_context)
    assert references(processed) == ["DelnorteProperties"]
    assert resolve_params(processed, resolution_context) == [
        [PROPERTIES_ADDRESS, "literal", [1]],
        [],
    ]


def test_deployer_without_account_resolves_to_zero_address(variable_context):
    processed = process_raw_values(["$deployer"], variable_context)
    context = ResolutionContext(deployments={})
    assert resolve_params(processed, context) == [ZERO_ADDRESS]


def test_reference_to_disabled_contract(variable_context):
    with pytest.raises(UnresolvedReferenceError, match="disabled"):
        process_raw_values(["$dUSDT"], variable_context)


def test_disabled_owner_may_reference_disabled_contract(variable_context):
    variable_context.enabled = False
    (reference,) = process_raw_values(["$dUSDT"], variable_context)
    assert reference.contract_name == "dUSDT"


def test_reference_not_yet_deployed(variable_context):
    (reference,) = process_raw_values(["$DelnorteProperties"], variable_context)
    with pytest.raises(UnresolvedReferenceError) as exc_info:
        reference.resolve(ResolutionContext(deployments={}))
    assert exc_info.value.contract_name == "DelnorteStaking"
    assert exc_info.value.reference == "DelnorteProperties"


def test_variable_repr(variable_context):
    processed = process_raw_values(["$DelnorteProperties", "$FEE", "$deployer"], variable_context)
    assert [repr(p) for p in processed] == ["$DelnorteProperties", "$FEE", "$deployer"]
