"""Operator confirmation before any restart is issued."""

from collections.abc import Callable

import click
from rich.console import Console
from rich.table import Table

from restarter.core.models import RestartPlan
from restarter.utils.logging import get_logger

logger = get_logger(__name__)

PROMPT = "Continue? [Y]/n: "


def read_stdin_line() -> str:
    """Read one line from stdin; empty string at end of input."""
    return click.get_text_stream("stdin").readline()


def interpret_answer(answer: str) -> bool:
    """Decide whether an answer means "proceed".

    A "y" is appended before looking at the first character, so empty input
    proceeds and so does anything starting with "y" or "t".
    """
    first = (answer.rstrip("\r\n").lower() + "y")[0]
    return first in ("y", "t")


class ConfirmationGate:
    """Shows the restart plan and asks a single yes/no question."""

    def __init__(
        self,
        console: Console | None = None,
        reader: Callable[[], str] | None = None,
        assume_yes: bool = False,
    ):
        self.console = console or Console()
        self.reader = reader or read_stdin_line
        self.assume_yes = assume_yes

    def should_continue(self, plan: RestartPlan) -> bool:
        """Return True when the restart loop should run.

        An empty plan returns False without prompting.
        """
        if not plan:
            logger.info("no_deployments_to_restart", namespace=plan.namespace)
            return False

        self.show(plan)
        logger.info("deployments_to_restart", count=len(plan), deployments=plan.deployments)

        if self.assume_yes:
            logger.info("confirmation_skipped")
            return True

        self.console.print(PROMPT, end="", markup=False, highlight=False)
        answer = self.reader()
        proceed = interpret_answer(answer)

        logger.info("confirmation_answered", proceed=proceed)
        return proceed

    def show(self, plan: RestartPlan) -> None:
        """Print the deployments about to be restarted."""
        table = Table(title=f"Deployments to be restarted ({len(plan)})")
        table.add_column("Deployment", style="cyan")
        table.add_column("Stale Pods", justify="right")
        table.add_column("Namespace")

        for deployment in plan.deployments:
            table.add_row(deployment, str(len(plan.pods_for(deployment))), plan.namespace)

        self.console.print(table)
