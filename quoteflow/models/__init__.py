# registers every table on Base.metadata
from quoteflow.models.audit_log import AuditLog  # noqa: F401
from quoteflow.models.counter import Counter  # noqa: F401
from quoteflow.models.invoice import Invoice  # noqa: F401
from quoteflow.models.project import Project  # noqa: F401
from quoteflow.models.quotation import Quotation  # noqa: F401
from quoteflow.models.user import User  # noqa: F401
