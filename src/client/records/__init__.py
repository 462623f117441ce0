"""Records bounded context.

Record kinds stored in the local datastore, plus the helpers that create
records and allocate their serial numbers. Importing this package
registers the record tables on the declarative base.
"""

from records.infrastructure import models  # noqa: F401
