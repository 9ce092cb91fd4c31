"""Response rendering for generated commands.

Every generated command ends with :func:`handle_response`: the status line
goes to stderr and the body to stdout through the global
:class:`~designcli.output.OutputManager`.
"""

from __future__ import annotations

from typing import Any

import httpx

from designcli.output import get_output


def handle_response(response: httpx.Response, pretty_print: bool = False) -> None:
    """Render *response*.

    Args:
        response: A successful response (errors were raised by the client).
        pretty_print: Indent JSON bodies (the ``--pp`` flag).
    """
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())
    data = extract_response_data(response)
    if data is not None:
        output.format_response(data, pretty=pretty_print)


def extract_response_data(response: httpx.Response) -> Any:
    """Return the decoded JSON body, the raw text, or ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
