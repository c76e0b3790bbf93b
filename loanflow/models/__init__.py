# Import models here so Alembic can discover them via metadata
from .application import Application, ApplicationTag, Document  # noqa: F401
from .application_history import ApplicationHistory  # noqa: F401
from .tag import Tag  # noqa: F401
