# Vigilance — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.actor import Actor             # noqa
from app.models.alert import Alert             # noqa
from app.models.alert_vote import AlertVote    # noqa
from app.models.alert_view import AlertView    # noqa
