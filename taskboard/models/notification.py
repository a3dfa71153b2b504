"""
Notification ("toast") model
"""

from enum import Enum
from typing import Optional, List, Callable, Any, Dict
from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Notification types, each with its own styling and default duration"""
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class NotificationAction(BaseModel):
    """Button shown on a notification"""
    label: str
    handler: Callable[[], Any]


class NotificationConfig(BaseModel):
    """Everything a consumer needs to render the active notification"""
    type: NotificationType
    message: str
    title: Optional[str] = None
    duration: int = Field(0, ge=0)  # milliseconds, 0 = stays until hidden
    icon: Optional[str] = None
    actions: List[NotificationAction] = Field(default_factory=list)

    @property
    def persistent(self) -> bool:
        return self.duration == 0

    def public(self) -> Dict[str, Any]:
        """Serializable view without the action handlers"""
        return {
            "type": self.type.value,
            "message": self.message,
            "title": self.title,
            "duration": self.duration,
            "icon": self.icon,
            "actions": [action.label for action in self.actions],
        }
