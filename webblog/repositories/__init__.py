# Repositories package.
#
# One class per entity, each wrapping the request's AsyncSession:
#
#   ArticleRepository  - articles, with author/tags/comments eager loading
#   TagRepository      - tags, lookup by name
#   CommentRepository  - comments, listing per article
#   UserRepository     - users, lookup by username/email
#   RoleRepository     - roles, lookup by name
#
# Repositories stage writes and flush on save(); they never commit.
from webblog.repositories.article_repository import ArticleRepository
from webblog.repositories.comment_repository import CommentRepository
from webblog.repositories.role_repository import RoleRepository
from webblog.repositories.tag_repository import TagRepository
from webblog.repositories.user_repository import UserRepository

__all__ = [
    "ArticleRepository",
    "CommentRepository",
    "RoleRepository",
    "TagRepository",
    "UserRepository",
]
