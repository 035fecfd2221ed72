import re
from dataclasses import dataclass

from table_quantities.core.entities import ResultType

# For TEXT type results: [[/r 1d4]]@UUID[Item.xxx]{Display Name}
# Group 1: dice formula, Group 2: UUID, Group 3: display name
TEXT_PATTERN = re.compile(r"\[\[/r\s+([^\]]+)\]\]\s*@UUID\[([^\]]+)\]\{([^}]*)\}")

# For DOCUMENT type results: just [[/r 1d4]] in the description field
# Group 1: dice formula
ROLL_PATTERN = re.compile(r"\[\[/r\s+([^\]]+)\]\]")


@dataclass(frozen=True)
class QuantityDirective:
    formula: str
    uuid: str
    name: str


def parse_quantity_result(result) -> QuantityDirective | None:
    """
    Parse a table result for a quantity pattern. Handles two cases:

    1. DOCUMENT type: description contains [[/r formula]], document_uuid has the target
    2. Any type (normally TEXT): description contains [[/r formula]]@UUID[...]{Name}

    Returns None when the result carries no directive; never raises.
    """
    description = getattr(result, "description", None) or ""
    result_type = getattr(result, "type", None)

    # Case 1: Document type result, formula in description, UUID on the result itself
    document_uuid = getattr(result, "document_uuid", None)
    if result_type == ResultType.DOCUMENT and document_uuid:
        roll_match = ROLL_PATTERN.search(description)
        if roll_match:
            return QuantityDirective(
                formula=roll_match.group(1),
                uuid=document_uuid,
                name=getattr(result, "name", None) or ""
            )

    # Case 2: Self-contained pattern in description (in practice a TEXT type result)
    full_match = TEXT_PATTERN.search(description)
    if full_match:
        return QuantityDirective(
            formula=full_match.group(1),
            uuid=full_match.group(2),
            name=full_match.group(3)
        )

    return None
