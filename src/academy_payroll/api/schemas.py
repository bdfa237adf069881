"""
academy_payroll.api.schemas

Shared request/response building blocks.

Responsibilities:
- camelCase wire names over snake_case Python fields.
- Monetary amounts as Decimal in Python, JSON numbers on the wire.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
