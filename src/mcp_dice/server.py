from __future__ import annotations

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from .config import get_settings
from .dice import DiceError, roll_from_text
from .log import setup_logging


mcp = FastMCP("mcp-dice")


@mcp.tool(annotations=ToolAnnotations(title="D&D dice roller (read-only)", readOnlyHint=True))
def roll_dice(
    notation: Annotated[
        str,
        Field(min_length=1, description="Dice expression, e.g. '1d20+5 adv', '4d6kh3', '2d6+1d4+3'."),
    ],
) -> dict[str, Any]:
    """Roll dice from standard notation.

    Supports NdS terms with kh/kl/dh/dl selectors, flat modifiers and a
    trailing 'adv' or 'dis' for a single d20.

    Output: structured JSON with every die rolled, the indices that counted,
    the total and an explanation.

    Raises a hard error (exception) on invalid input.
    """

    try:
        return roll_from_text(notation, settings=get_settings())
    except DiceError as e:
        # Fail-fast: surface stable error codes in the message.
        raise ValueError(str(e)) from None


def run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    # Default transport is stdio; sse and streamable-http are available for hosted use.
    mcp.run(transport=settings.transport)


if __name__ == "__main__":
    run()
