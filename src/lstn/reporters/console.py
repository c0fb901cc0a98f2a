"""Rendering of the combined response on stdout: JSON or tables."""

from ..models.verdicts import Response, dump_response
from ..output import OutputContext
from .table import render_table


def render(out: OutputContext, response: Response, jq_expression: str = "") -> None:
    """Print the response as tables, or as JSON in JSON mode.

    With a jq expression the client already streamed the filtered payloads,
    so nothing is printed here.
    """
    if out.json_mode:
        if not jq_expression:
            out.print_json(dump_response(response))
        return
    render_table(out.console, response)
