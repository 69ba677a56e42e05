from collections.abc import Mapping
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from feemirror.models.enums import BillingCycle
from feemirror.schemas.base import Currency, MirrorDocument, Text
from feemirror.utils.values import ZERO


class ClassGroup(MirrorDocument):
    id: Text = ""
    name: Text = ""
    standard_fee: Currency = ZERO


class AppSettings(MirrorDocument):
    """
    School-wide billing configuration (the single document in `settings`).

    `standard_fee` on each class group is always a monthly rate.
    """
    id: Text = ""
    school_name: Text = ""
    billing_cycle: Optional[BillingCycle] = None
    class_groups: Dict[str, ClassGroup] = Field(default_factory=dict)

    @field_validator("billing_cycle", mode="before")
    @classmethod
    def normalize_billing_cycle(cls, v: Any) -> Optional[BillingCycle]:
        """Case-insensitive; unknown values mean "not configured"."""
        if v is None or isinstance(v, BillingCycle):
            return v
        try:
            return BillingCycle(v)
        except (ValueError, TypeError):
            return None

    @field_validator("class_groups", mode="before")
    @classmethod
    def index_class_groups(cls, v: Any) -> Dict[str, Any]:
        """Upstream stores a list of {id, name, standardFee}; index it by id."""
        if isinstance(v, (list, tuple)):
            indexed = {}
            for group in v:
                if isinstance(group, Mapping) and group.get("id") not in (None, ""):
                    indexed[str(group["id"])] = group
                elif isinstance(group, ClassGroup) and group.id:
                    indexed[group.id] = group
            return indexed
        if isinstance(v, Mapping):
            indexed = {}
            for key, group in v.items():
                if isinstance(group, Mapping):
                    indexed[str(key)] = {**group, "id": str(key)}
                elif isinstance(group, ClassGroup):
                    indexed[str(key)] = group
            return indexed
        return {}

    def get_class_group(self, group_id: str) -> Optional[ClassGroup]:
        if not group_id:
            return None
        return self.class_groups.get(group_id)
