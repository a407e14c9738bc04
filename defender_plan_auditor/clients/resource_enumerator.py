"""Lists the compute-family resources covered by a scan profile"""

from typing import Dict, List, Sequence

from azure.core.exceptions import AzureError
from azure.mgmt.resource import ResourceManagementClient

from ..core.exceptions import EnumerationError
from ..core.interfaces import IResourceEnumerator
from ..core.models import AzureResourceType, ResourceDescriptor
from ..utils.logger import setup_logger


def build_type_filter(resource_types: Sequence[AzureResourceType]) -> str:
    """OData filter selecting any of ``resource_types``"""
    return " or ".join(f"resourceType eq '{resource_type.value}'" for resource_type in resource_types)


class AzureResourceEnumerator(IResourceEnumerator):
    """Resource Manager backed enumerator.

    Resources come back in the order the listing API returns them.
    """

    def __init__(self, credential, resource_types: Sequence[AzureResourceType]):
        if not resource_types:
            raise ValueError("At least one resource type is required")
        self.credential = credential
        self.resource_types = tuple(resource_types)
        self.logger = setup_logger(self.__class__.__name__)
        self._client_cache: Dict[str, ResourceManagementClient] = {}

    def _client(self, subscription_id: str) -> ResourceManagementClient:
        if subscription_id not in self._client_cache:
            self._client_cache[subscription_id] = ResourceManagementClient(self.credential, subscription_id)
        return self._client_cache[subscription_id]

    def list_resources(self, subscription_id: str) -> List[ResourceDescriptor]:
        type_filter = build_type_filter(self.resource_types)
        self.logger.debug(f"Listing resources in {subscription_id} with filter: {type_filter}")

        try:
            return [
                ResourceDescriptor(name=item.name, resource_id=item.id, resource_type=item.type)
                for item in self._client(subscription_id).resources.list(filter=type_filter)
            ]
        except AzureError as e:
            self.logger.error(f"Failed to list resources in subscription {subscription_id}: {e}")
            raise EnumerationError(subscription_id, str(e)) from e
