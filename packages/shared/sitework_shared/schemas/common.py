from enum import Enum
from pydantic import BaseModel


class _HyphenatedEnum(str, Enum):
    """Accepts ``in_progress`` style spellings and maps them to ``in-progress``."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class TaskStatus(_HyphenatedEnum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that release a finish-to-start dependent
RESOLVED_TASK_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})

# Statuses that may only be entered once prerequisites are resolved
GATED_TASK_STATUSES = frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED})


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProjectStatus(_HyphenatedEnum):
    NEW = "new"
    PLANNING = "planning"
    ACTIVE = "active"
    ON_TRACK = "on-track"
    DELAYED = "delayed"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class ContactType(str, Enum):
    CONTRACTOR = "contractor"
    VENDOR = "vendor"
    CUSTOMER = "customer"
    DESIGN_PROFESSIONAL = "design_professional"


class DependencyType(str, Enum):
    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"


class ErrorBody(BaseModel):
    code: str
    message: str
    status: int


class ErrorResponse(BaseModel):
    error: ErrorBody
