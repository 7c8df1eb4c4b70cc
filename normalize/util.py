"""
Normalization utility helpers.
Extract string values from tracker extension fields and classify doc text status tokens.
"""
import logging
from typing import Dict, Any, List, Sequence

from errors import FieldResolutionError, ClassificationError
from normalize.models import DocTextStatus

logger = logging.getLogger(__name__)

# substituted when the doc text status flag is not set on a ticket at all
DEFAULT_DOC_TEXT_STATUS = '?'

DOC_TEXT_STATUS_TOKENS = {
    '+': DocTextStatus.APPROVED,
    'Done': DocTextStatus.APPROVED,
    '?': DocTextStatus.IN_PROGRESS,
    'Proposed': DocTextStatus.IN_PROGRESS,
    'In progress': DocTextStatus.IN_PROGRESS,
    'Unset': DocTextStatus.IN_PROGRESS,
    '-': DocTextStatus.NO_DOCUMENTATION,
    'Rejected': DocTextStatus.NO_DOCUMENTATION,
    'Upstream only': DocTextStatus.NO_DOCUMENTATION,
}


def readable_errors(errors: List[str]) -> str:
    """Return a user-readable list of errors, or an empty string."""
    if not errors:
        return ''
    return "\nThe following errors occurred:\n" + "\n".join(errors)


def extract_field(extra: Dict[str, Any], fields: Sequence[str], ticket_id) -> str:
    """Return the first string value among the candidate fields.

    Fields are tried in order and the first string wins. A field that exists
    with a null value counts as empty: if nothing better turns up, an empty
    string is returned and the empty fields are logged. If no field is a string
    and none is empty, FieldResolutionError lists what went wrong with each field.
    """
    if not isinstance(extra, dict):
        extra = {}
    errors: List[str] = []
    empty_fields: List[str] = []

    for field in fields:
        if field not in extra:
            errors.append(f"Field `{field}` is missing in ticket {ticket_id}.")
            continue
        value = extra[field]
        if value is None:
            empty_fields.append(field)
        elif isinstance(value, str):
            return value
        else:
            errors.append(f"Field `{field}` is not a string in ticket {ticket_id}: {value!r}")

    if empty_fields:
        logger.warning("Fields are empty in ticket %s: %s", ticket_id, ", ".join(empty_fields))
        return ''

    raise FieldResolutionError(
        f"Fields are missing or malformed in ticket {ticket_id}.{readable_errors(errors)}",
        fields=fields,
        errors=errors,
    )


def classify_doc_text_status(value) -> DocTextStatus:
    """Map a tracker flag or field value to a DocTextStatus. Matching is case-sensitive."""
    try:
        return DOC_TEXT_STATUS_TOKENS[value]
    except (KeyError, TypeError):
        raise ClassificationError(value) from None
