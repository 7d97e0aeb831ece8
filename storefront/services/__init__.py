# Services package.
#
# Each module owns the business logic for one aggregate:
#
#   auth_service: signup, signin, password reset, session resolution
#   item_service: item reads (cached) and authorised item writes
#   cart_service: add-to-cart with per-item quantity
#   user_service: me, the admin user list, permission updates
#
# Service code talks to the database only through the repositories in
# ``storefront.repositories`` and receives an AsyncSession from the router
# layer, which owns the transaction boundary via the ``get_db`` dependency.
# Failures are raised as ``storefront.exceptions`` errors.
