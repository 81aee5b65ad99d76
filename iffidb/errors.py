"""Base exception for everything IffiDB raises on purpose."""


class IffiDBError(Exception):
    """
    Root of the IffiDB error taxonomy.

    The concrete errors live next to the code that raises them:
    storage errors in services.storage, record errors in services.records,
    auth errors in services.auth and command errors in commands.executor.
    """
    pass
