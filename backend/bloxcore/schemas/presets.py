"""Layout preset and related value types."""

from enum import Enum
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ExpanderState(str, Enum):
    """Visual state of one side panel expander."""

    COLLAPSED = "Collapsed"
    CLOSED = "Closed"
    OPENED = "Opened"
    EXPANDED = "Expanded"


class LayoutPreset(BaseModel):
    """Named snapshot of the workspace layout.

    Persistence stores presets as plain JSON objects and must hand them back
    untouched, so the model allows unknown keys and is only used where a
    preset is *built* (capture from state) or inspected defensively.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    main_area_count: int = Field(default=1, alias="mainAreaCount")
    viewport_width_mode: str = Field(default="1x", alias="viewportWidthMode")
    expansion: Dict[str, str] = Field(default_factory=dict)
    main_view_order: List[str] = Field(default_factory=list, alias="mainViewOrder")
    left_view_order: Optional[List[str]] = Field(default=None, alias="leftViewOrder")
    right_view_order: Optional[List[str]] = Field(default=None, alias="rightViewOrder")
    bottom_view_order: Optional[List[str]] = Field(default=None, alias="bottomViewOrder")
    left_view_id: Optional[str] = Field(default=None, alias="leftViewId")
    right_view_id: Optional[str] = Field(default=None, alias="rightViewId")
    bottom_view_id: Optional[str] = Field(default=None, alias="bottomViewId")
    panel_sizes: Optional[Dict[str, Any]] = Field(default=None, alias="panelSizes")
    is_system_preset: Optional[bool] = Field(default=None, alias="isSystemPreset")
    view_instances: Optional[Dict[str, Dict[str, Any]]] = Field(default=None, alias="viewInstances")

    def to_wire(self) -> Dict[str, Any]:
        """Serialise using camelCase keys, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


__all__ = ["ExpanderState", "LayoutPreset"]
