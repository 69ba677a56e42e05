"""Base schema and lenient field types for mirrored documents"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from feemirror.utils.values import (
    parse_date,
    parse_datetime,
    to_bool,
    to_decimal,
    to_int,
    to_optional_decimal,
    to_optional_text,
    to_text,
)

Currency = Annotated[Decimal, BeforeValidator(to_decimal)]
OptionalCurrency = Annotated[Optional[Decimal], BeforeValidator(to_optional_decimal)]
Flag = Annotated[bool, BeforeValidator(to_bool)]
Text = Annotated[str, BeforeValidator(to_text)]
OptionalText = Annotated[Optional[str], BeforeValidator(to_optional_text)]
PeriodNumber = Annotated[Optional[int], BeforeValidator(to_int)]
LenientDate = Annotated[Optional[date], BeforeValidator(parse_date)]
LenientDatetime = Annotated[Optional[datetime], BeforeValidator(parse_datetime)]


class MirrorDocument(BaseModel):
    """
    A read-only snapshot of one upstream document.

    Upstream keys are camelCase; snake_case names are accepted too.
    Unknown keys are ignored and instances are immutable.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )
