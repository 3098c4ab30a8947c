# This file marks the services package for resource and integration services.
# Routers depend on these classes instead of talking to the document store directly.
