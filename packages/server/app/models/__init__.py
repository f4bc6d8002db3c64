# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import TenantMixin, TimestampMixin, UUIDMixin  # noqa: F401
from .tenant import Tenant  # noqa: F401
from .project import Project  # noqa: F401
from .contact import Contact  # noqa: F401
from .task import Task  # noqa: F401
from .dependency import TaskDependency  # noqa: F401
from .activity import ActivityEvent  # noqa: F401
