from blogdesk.services.mutations import MutationService
from blogdesk.services.queries import QueryService

__all__ = ["MutationService", "QueryService"]
