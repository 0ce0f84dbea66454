from typing import Any, Dict, Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body with camelCase wire names and snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_doc(self, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        """Fields the caller actually sent, keyed by their wire names."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude=set(exclude))
