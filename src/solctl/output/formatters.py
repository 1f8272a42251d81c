"""Rich/JSON output selection.

The CLI renders ServiceResult for humans (Rich tables) or machines
(``--json``).  This layer picks the mode; :mod:`solctl.output.renderers`
owns the human layouts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from solctl.output.renderers import render_result

if TYPE_CHECKING:
    from solctl.services.result import ServiceResult


def format_result(
    result: ServiceResult, *, json_output: bool = False, verbose: bool = False
) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        json_output: If True, return JSON; otherwise return Rich-rendered text.
        verbose: Include error detail and the telemetry span tree.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    return render_result(result, verbose=verbose)
