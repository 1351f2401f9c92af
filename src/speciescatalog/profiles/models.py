"""Database models for user profiles."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel


class Profile(SQLModel, table=True):
    """A registered user; species records reference it as their author."""

    __tablename__: str = "profiles"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)
    username: str = Field(sa_column=Column(String(64), unique=True, index=True, nullable=False))
    display_name: str = Field(sa_column=Column(String(120), nullable=False))
    password_hash: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
