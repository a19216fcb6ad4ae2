"""
Directory Service Layer - customer resolution for quotes and sales.
"""
import logging
from typing import Dict, Optional, Tuple

from .models import Client

logger = logging.getLogger(__name__)


class ClientNotFoundError(Exception):
    """Raised when a referenced client does not exist."""
    def __init__(self, client_id):
        self.client_id = client_id
        super().__init__(f"Client {client_id} not found")


def resolve_customer(customer: Dict) -> Tuple[Optional[Client], str, str]:
    """
    Work out who a quote or sale is for.

    Args:
        customer: Dict with any of 'client_id', 'name', 'phone', 'email'
            and 'create_client'. An explicit name or phone overrides the
            linked client's values. With create_client and no client_id,
            a new Client is inserted from name/phone/email.

    Returns:
        Tuple of (Client or None, customer name, customer phone)

    Raises:
        ClientNotFoundError: If client_id does not exist

    Must be called inside the caller's transaction so a created client is
    rolled back with the rest of the write.
    """
    name = (customer.get('name') or '').strip()
    phone = (customer.get('phone') or '').strip()
    client_id = customer.get('client_id')

    if client_id:
        try:
            client = Client.objects.get(pk=client_id)
        except Client.DoesNotExist:
            raise ClientNotFoundError(client_id)
        return client, name or client.name, phone or client.phone

    if customer.get('create_client') and name:
        client = Client.objects.create(
            name=name,
            phone=phone,
            email=(customer.get('email') or '').strip(),
        )
        logger.info(f"Created client #{client.pk} {client.name}")
        return client, name, phone

    return None, name, phone
