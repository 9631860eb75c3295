"""
Pydantic schemas for lobby endpoints and live-connection payloads.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from lobbychat.constants import (
    MAX_CODE_LENGTH,
    MAX_CONTENT_LENGTH,
    MAX_CREDENTIAL_LENGTH,
    MAX_NICKNAME_LENGTH,
    MIN_CODE_LENGTH,
)


class CreateLobbyRequest(BaseModel):
    nickname: str = Field(min_length=1, max_length=MAX_NICKNAME_LENGTH)
    credential: str | None = Field(
        default=None,
        min_length=1,
        max_length=MAX_CREDENTIAL_LENGTH,
        validation_alias=AliasChoices("openaiApiKey", "assistantCredential", "credential"),
        repr=False,
    )


class JoinLobbyRequest(BaseModel):
    code: str = Field(min_length=MIN_CODE_LENGTH, max_length=MAX_CODE_LENGTH)
    nickname: str = Field(min_length=1, max_length=MAX_NICKNAME_LENGTH)


class SendMessagePayload(BaseModel):
    code: str
    nickname: str
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH)


class CreateLobbyResponse(BaseModel):
    code: str


class JoinLobbyResponse(BaseModel):
    ok: bool


class MessageRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    lobby_code: str = Field(alias="lobbyCode")
    sender: str
    role: str
    content: str
    created_at: int = Field(alias="createdAt")


class MessageHistory(BaseModel):
    messages: list[MessageRecord]
