# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic for a single domain aggregate:
#
#   article_service  create / edit (tag reconciliation, optimistic
#                    concurrency) / delete / read / sort for Article
#   tag_service      CRUD for Tag with duplicate-name validation
#   comment_service  CRUD for Comment
#   user_service     accounts, credentials, role membership
#   role_service     CRUD for Role, built-in role seeding
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Business failures are raised as the exceptions
# in ``webblog.exceptions``.
