"""Visit registration: idempotent client bootstrap on first contact."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.client.client import Client
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Client")
class RegisterVisit:
    client_id: Identifier(required=True)
    name: String(max_length=255)
    username: String(max_length=100)


@storefront.command_handler(part_of=Client)
class RegisterVisitHandler:
    @handle(RegisterVisit)
    def register_visit(self, command):
        clients = current_domain.repository_for(Client)
        client, created = clients.ensure(command.client_id, name=command.name)
        if created:
            client.update_contact(username=command.username)
            clients.add(client)
            logger.info("client_registered", client_id=str(client.client_id))
        return {"is_new": created}
