"""Tenant model (the isolation boundary; not itself tenant-scoped)."""

from sqlmodel import Field, SQLModel

from .base import JSONType, TimestampMixin, UUIDMixin


class Tenant(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    name: str = Field(nullable=False)
    slug: str = Field(unique=True, nullable=False, index=True)
    settings: dict = Field(default_factory=dict, sa_type=JSONType, nullable=False)
