#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from delnorte_deployment.deployment import Deployment
from delnorte_deployment.exceptions import (
    DeploymentAborted,
    DeploymentConfigError,
    OrchestrationError,
)
from delnorte_deployment.options import (
    autosign_option,
    confirmations_option,
    plan_option,
    verify_option,
)


@click.command(cls=ConnectedProviderCommand, name="deploy")
@account_option()
@network_option(required=True)
@plan_option
@autosign_option
@verify_option
@confirmations_option
def cli(network, account, plan, autosign, verify, confirmations):
    """
    Deploys the enabled contracts of a Delnorte deployment plan, in order.

    ape run deploy --plan staking --network polygon:mumbai:infura
    """
    try:
        deployment = Deployment.from_yaml(
            filepath=plan,
            verify=verify,
            account=account,
            autosign=autosign,
            confirmations=confirmations,
        )
        deployments = deployment.run()
    except DeploymentAborted as e:
        where = f" at {e.contract_name}" if e.contract_name else ""
        click.secho(f"Aborting deployment{where}!", fg="yellow")
        raise SystemExit(-1)
    except OrchestrationError as e:
        click.secho(f"Deployment failed at step {e.contract_name}: {e}", fg="red")
        raise SystemExit(1)
    except DeploymentConfigError as e:
        click.secho(f"Invalid deployment file {plan}: {e}", fg="red")
        raise SystemExit(1)

    for instance in deployments:
        click.secho(f"'{instance.name}' deployed to: {instance.address}", fg="green")


if __name__ == "__main__":
    cli()
