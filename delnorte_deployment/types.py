from pathlib import Path

import click

from delnorte_deployment.constants import (
    CONSTRUCTOR_PARAMS_DIR,
    PLAN_FILE_SUFFIX,
    SUPPORTED_PLANS,
)

PLAN_FILE_SUFFIXES = (PLAN_FILE_SUFFIX, ".yaml")


class PlanFile(click.ParamType):
    """The name of a shipped plan, or the path of a plan file."""

    name = "plan"

    def convert(self, value, param, ctx):
        if isinstance(value, Path):
            return value
        if value in SUPPORTED_PLANS:
            return CONSTRUCTOR_PARAMS_DIR / f"{value}{PLAN_FILE_SUFFIX}"
        filepath = Path(value)
        if filepath.suffix in PLAN_FILE_SUFFIXES and filepath.is_file():
            return filepath
        self.fail(
            f"{value} is neither a shipped plan ({', '.join(SUPPORTED_PLANS)}) nor a plan file",
            param,
            ctx,
        )
