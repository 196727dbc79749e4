from .base import *  # noqa
import dj_database_url

DEBUG = True
ALLOWED_HOSTS = ["*"]

# Local DB: default sqlite unless DATABASE_URL provided.
DATABASE_URL = os.environ.get("DATABASE_URL", None)
if DATABASE_URL:
    DATABASES["default"] = dj_database_url.parse(DATABASE_URL)

# Run Celery tasks inline unless a broker is explicitly configured
CELERY_TASK_ALWAYS_EAGER = os.environ.get("CELERY_TASK_ALWAYS_EAGER", "True").lower() in ("1", "true", "yes")
