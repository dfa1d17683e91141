# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single domain aggregate:
#
#   article_service  : create / detail / list / update / delete for Article
#   category_service : CRUD for Category, with association cleanup
#   auth_service     : registration and login against the users table
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Mutations that must not be partially applied
# flush inside that single transaction and raise before commit on failure.
