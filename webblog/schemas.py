from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Request bodies use camelCase keys on the wire (authorId, isChecked, ...);
# snake_case names are accepted too.
WIRE_FORMAT = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Tag ---

class TagBase(BaseModel):
    name: str = Field(min_length=1, max_length=20)


class TagCreate(TagBase):
    pass


class TagUpdate(TagBase):
    tag_id: int
    model_config = WIRE_FORMAT


class TagResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


class ArticleSummary(BaseModel):
    id: int
    title: str
    author_id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TagDetail(TagResponse):
    articles: list[ArticleSummary] = []


class TagChoice(BaseModel):
    """A tag as offered on article forms, with its selection state."""
    id: int | None = None
    name: str
    is_selected: bool = False


# --- Role ---

class RoleBase(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    security_level: int
    description: str | None = Field(None, max_length=200)


class RoleCreate(RoleBase):
    pass


class RoleUpdate(RoleBase):
    id: int


class RoleResponse(RoleBase):
    id: int
    model_config = ConfigDict(from_attributes=True)


# --- User ---

class UserBase(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    custom_field: str | None = Field(None, max_length=100)
    phone_number: str | None = Field(None, max_length=30)


class UserCreate(UserBase):
    password: str = Field(min_length=3, max_length=72)


class UserUpdate(UserBase):
    pass


class UserResponse(UserBase):
    id: int
    created_at: datetime
    roles: list[str] = Field(default=[], validation_alias="role_names")
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# --- Comment ---

class CommentBase(BaseModel):
    title: str | None = Field(None, max_length=100)
    content: str = Field(min_length=1, max_length=200)


class CommentCreate(CommentBase):
    article_id: int
    model_config = WIRE_FORMAT


class CommentUpdate(CommentBase):
    comment_id: int
    model_config = WIRE_FORMAT


class CommentResponse(CommentBase):
    id: int
    article_id: int
    author_id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Article ---

class ArticleTagRequest(BaseModel):
    """A tag entry on the create form; only checked entries are attached."""
    name: str = Field(min_length=1, max_length=20)
    is_checked: bool = True
    model_config = WIRE_FORMAT


class ArticleTagSelection(BaseModel):
    """A tag entry on the edit form; ``is_selected`` drives attach/detach."""
    name: str = Field(min_length=1, max_length=20)
    is_selected: bool = True
    model_config = WIRE_FORMAT


class ArticleCreate(BaseModel):
    author_id: int | None = None
    title: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1, max_length=1000)
    tags: list[ArticleTagRequest] = []
    model_config = WIRE_FORMAT


class ArticleUpdate(BaseModel):
    article_id: int
    title: str = Field(min_length=1, max_length=100)
    # Omitted content keeps the stored text.
    content: str | None = Field(None, min_length=1, max_length=1000)
    tags: list[ArticleTagSelection] = []
    # Concurrency token from a previous read; omitted means "last write wins".
    version: int | None = None
    model_config = WIRE_FORMAT


class ArticleDeleteRequest(BaseModel):
    id: int


class AuthorResponse(BaseModel):
    id: int
    username: str
    email: str
    model_config = ConfigDict(from_attributes=True)


class ArticleResponse(BaseModel):
    id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime | None = None
    view_count: int
    version: int = Field(validation_alias="version_id")
    author_id: int
    author: AuthorResponse | None = None
    tags: list[TagResponse] = []
    comments: list[CommentResponse] = []
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ArticleEditForm(BaseModel):
    article: ArticleResponse
    tags: list[TagChoice]


class ArticleDeleteView(BaseModel):
    article: ArticleResponse
    error_message: str | None = None
