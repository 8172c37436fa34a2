from nexacrm.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all
from nexacrm.models.user import User  # noqa: F401
from nexacrm.models.lead import Lead  # noqa: F401
from nexacrm.models.note import Note  # noqa: F401
from nexacrm.models.task import Task  # noqa: F401
from nexacrm.models.file import File  # noqa: F401
from nexacrm.models.social import SocialMonitor, SocialResult  # noqa: F401
from nexacrm.models.ticket import Ticket, TicketMessage  # noqa: F401
from nexacrm.models.activity_log import ActivityLog  # noqa: F401
