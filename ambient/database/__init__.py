"""Schema introspection and SQL execution against the configured database.

Import from the submodules directly (``ambient.database.introspector``,
``ambient.database.executor``). The connectors import the catalog templates
from here, so this package does not re-export anything.
"""
