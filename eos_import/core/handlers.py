"""Per-type import handlers.

Maps every ImportType to its descriptor, validator, transformer and target
table. Adding an importable type means adding one entry here (plus its
descriptor, validator and transformer).
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union

from pydantic import BaseModel

from eos_import.core import transformers, validators
from eos_import.core.import_types import IMPORT_TYPES, ImportTypeDef, parse_import_type
from eos_import.core.models import ImportType

Validator = Callable[[dict[str, str], int], list[validators.ValidationError]]
Transformer = Callable[[dict[str, str], str, str], BaseModel]


@dataclass(frozen=True)
class ImportHandler:
    descriptor: ImportTypeDef
    validate: Validator
    transform: Transformer
    table: str


HANDLERS: dict[ImportType, ImportHandler] = {
    ImportType.USERS: ImportHandler(
        IMPORT_TYPES[ImportType.USERS], validators.validate_user, transformers.transform_user, "users",
    ),
    ImportType.SCORECARDS: ImportHandler(
        IMPORT_TYPES[ImportType.SCORECARDS], validators.validate_scorecard,
        transformers.transform_scorecard, "scorecards",
    ),
    ImportType.ROCKS: ImportHandler(
        IMPORT_TYPES[ImportType.ROCKS], validators.validate_rock, transformers.transform_rock, "rocks",
    ),
    ImportType.TODOS: ImportHandler(
        IMPORT_TYPES[ImportType.TODOS], validators.validate_todo, transformers.transform_todo, "todos",
    ),
    ImportType.ISSUES: ImportHandler(
        IMPORT_TYPES[ImportType.ISSUES], validators.validate_issue, transformers.transform_issue, "issues",
    ),
    ImportType.MEETINGS: ImportHandler(
        IMPORT_TYPES[ImportType.MEETINGS], validators.validate_meeting,
        transformers.transform_meeting, "meetings",
    ),
    ImportType.PROCESSES: ImportHandler(
        IMPORT_TYPES[ImportType.PROCESSES], validators.validate_process,
        transformers.transform_process, "processes",
    ),
}

MEMBERSHIP_TABLE = "user_organizations"


def get_handler(import_type: Union[str, ImportType]) -> ImportHandler:
    """Look up the handler for a declared type (raises UnsupportedTypeError)."""
    return HANDLERS[parse_import_type(import_type)]


def validate_records(
    handler: ImportHandler,
    records: list[dict[str, str]],
    row_numbers: Optional[list[int]] = None,
) -> list[validators.ValidationError]:
    """Validate every record in file order.

    row_numbers gives each record its 1-based data-row number in the source
    file; without it records are numbered consecutively from 1.
    """
    if row_numbers is None:
        row_numbers = list(range(1, len(records) + 1))
    errors: list[validators.ValidationError] = []
    for row_number, record in zip(row_numbers, records):
        errors.extend(handler.validate(record, row_number))
    return errors
