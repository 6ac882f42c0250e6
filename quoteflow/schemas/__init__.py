from quoteflow.schemas.primitives import Money, PositiveMoney, Area, ClientName, ClientAddress, ClientNumber, Note
from quoteflow.schemas.documents import LineItem, ExtraWorkItem, SiteImage, Payment, AuditEntry
from quoteflow.schemas.quotations import QuotationCreateRequest, QuotationPatchRequest
from quoteflow.schemas.projects import PaymentIn, ProjectPatchRequest
