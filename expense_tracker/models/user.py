"""
User Data Models

CRITICAL: The password hash only ever lives in User, which stays inside
the credential store. Callers get a UserIdentity, which carries no
credential material at all.
"""

from pydantic import BaseModel, ConfigDict, Field


class UserIdentity(BaseModel):
    """An authenticated user, as handed to the presentation layer."""
    model_config = ConfigDict(frozen=True)

    id: int
    username: str


class User(BaseModel):
    """A row of the users table."""

    id: int = Field(
        ...,
        description="Store-assigned surrogate key"
    )
    username: str = Field(
        ...,
        min_length=1,
        description="Unique, case-sensitive login name"
    )
    password_hash: str = Field(
        ...,
        repr=False,
        description="bcrypt hash of the password"
    )

    def identity(self) -> UserIdentity:
        return UserIdentity(id=self.id, username=self.username)
