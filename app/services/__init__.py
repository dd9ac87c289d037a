# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single domain aggregate:
#
#   publication_service   CRUD + cascade delete + cache for Publication
#   comment_service       CRUD for Comment, scoped to its owner
#   reaction_service      likes and shares
#   user_service          accounts, profiles and friendships
#   topic_service         topics and topic following
#   notification_service  activity notifications
#
# All service functions accept an AsyncSession as their first argument so
# that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Mutating functions take the caller's id as their
# second argument; it always comes from the authenticated request.
# Failures are raised as ``app.exceptions.AppError`` subclasses.
