from __future__ import annotations

import pydantic as p
from pydantic.alias_generators import to_camel


class ApiModel(p.BaseModel):
    """Bodies use camelCase keys, like `EvaluationSummary`; requests also accept the field names."""

    model_config = p.ConfigDict(alias_generator=to_camel, populate_by_name=True)
