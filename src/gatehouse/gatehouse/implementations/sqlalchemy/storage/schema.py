# ABOUTME: SQLAlchemy Core table definitions for the account aggregate
# ABOUTME: Natural keys are unique columns so the database itself rejects duplicates

from typing import Dict, Type

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, MetaData, Table, Text

from gatehouse.models.account import Entity, User, UserProfile

metadata = MetaData()

# ``seq`` gives a stable creation order for listing; ``id`` is the public identifier.
users = Table(
    "users",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", Text, nullable=False, unique=True),
    Column("email", Text, nullable=False, unique=True),
    Column("display_name", Text, nullable=False),
    Column("password_hash", Text, nullable=False),
    Column("scopes", JSON, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text),
)

user_profiles = Table(
    "user_profiles",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", Text, nullable=False, unique=True),
    Column("user_id", Text, ForeignKey("users.id"), nullable=False, unique=True),
    Column("locale", Text, nullable=False),
    Column("timezone", Text, nullable=False),
    Column("preferences", JSON, nullable=False),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text),
)

ENTITY_TABLES: Dict[Type[Entity], Table] = {
    User: users,
    UserProfile: user_profiles,
}

NATURAL_KEY_COLUMNS: Dict[Type[Entity], str] = {
    User: "email",
    UserProfile: "user_id",
}
