import click

from delnorte_deployment.types import PlanFile

plan_option = click.option(
    "--plan",
    "-p",
    help="Shipped plan name (see constructor_params) or path of a plan YAML file.",
    type=PlanFile(),
    required=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign and submit every deployment without asking for confirmation.",
    is_flag=True,
    default=False,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Publish deployed contracts to the block explorer.",
    default=False,
)

confirmations_option = click.option(
    "--confirmations",
    "-c",
    help="Number of block confirmations to wait for; overrides the plan file.",
    type=click.IntRange(min=0),
    required=False,
)
