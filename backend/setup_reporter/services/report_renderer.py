# backend/setup_reporter/services/report_renderer.py
"""Renders the long-setup report e-mail body."""

from typing import Dict, List, Sequence, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape

from ..constants import REPORT_TEMPLATE_NAME
from ..models.setup_event_model import SetupEvaluation

_environment = Environment(
    loader=PackageLoader("setup_reporter", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def group_by_machine(
    evaluations: Sequence[SetupEvaluation],
) -> List[Tuple[str, List[SetupEvaluation]]]:
    """Group evaluations by machine, machines in order of first appearance."""
    grouped: Dict[str, List[SetupEvaluation]] = {}
    for evaluation in evaluations:
        grouped.setdefault(evaluation.event.machine_id, []).append(evaluation)
    return list(grouped.items())


def render_report(evaluations: Sequence[SetupEvaluation]) -> str:
    """
    Render the HTML report.

    Args:
        evaluations: Included evaluations in database order

    Returns:
        Rendered HTML content
    """
    template = _environment.get_template(REPORT_TEMPLATE_NAME)
    return template.render(machines=group_by_machine(evaluations))
