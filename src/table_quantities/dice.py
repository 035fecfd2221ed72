import re
import random
import datetime

# --- Dice Logic ---

TERM_PATTERN = re.compile(r"([+-])?(?:(\d*)d(\d+)|(\d+))")
MAX_DICE = 1000


class DiceFormulaError(ValueError):
    """Raised when a formula cannot be evaluated by the dice roller."""


def roll_dice(expression: str) -> dict:
    """
    Parses a dice expression (e.g., '1d20+5') and returns the detailed result.
    Supported formats: sums and differences of NdM, dM and integer constants
    (e.g. '2d6+1', 'd8-1', '3', '1d4 + 1d6').
    """
    expression = expression.lower().replace(" ", "")
    if not expression:
        return {"error": "Invalid dice expression: (empty)"}

    rolls = []
    modifier = 0
    position = 0
    for match in TERM_PATTERN.finditer(expression):
        # Terms must be contiguous and every term after the first needs a sign
        if match.start() != position or (position > 0 and not match.group(1)):
            return {"error": f"Invalid dice expression: {expression}"}
        position = match.end()

        sign = -1 if match.group(1) == "-" else 1
        if match.group(4) is not None:
            modifier += sign * int(match.group(4))
            continue

        num_dice = int(match.group(2)) if match.group(2) else 1
        die_type = int(match.group(3))
        if die_type < 1 or num_dice > MAX_DICE:
            return {"error": f"Invalid dice expression: {expression}"}
        rolls.extend(sign * random.randint(1, die_type) for _ in range(num_dice))

    if position != len(expression):
        return {"error": f"Invalid dice expression: {expression}"}

    total = sum(rolls) + modifier

    return {
        "expression": expression,
        "rolls": rolls,
        "modifier": modifier,
        "total": total,
        "timestamp": datetime.datetime.now().isoformat()
    }


async def evaluate_formula(formula: str) -> int:
    """
    Evaluate a dice formula string and return the total.
    formula: e.g. "1d4", "2d6+1"
    """
    result = roll_dice(formula.strip())
    if "error" in result:
        raise DiceFormulaError(result["error"])
    return result["total"]
