"""
Contact service for contact CRUD against the document store
"""

from typing import Any, Dict, Optional, Union
from pydantic import ValidationError as PydanticValidationError
from taskboard.api.document_store import DocumentStore
from taskboard.config.constants import CONTACT_ID_PREFIX
from taskboard.config.settings import settings
from taskboard.models.contact import ContactCreate, ContactUpdate, generate_initials
from taskboard.services.id_generator import SequentialIdGenerator
from taskboard.services.task_service import create_with_sequential_id, random_color, validation_message
from taskboard.utils.error_handler import ValidationError
from taskboard.utils.logger import logger


class ContactService:
    """Service for managing the contact directory"""

    def __init__(
        self,
        store: DocumentStore,
        id_generator: Optional[SequentialIdGenerator] = None,
        collection: Optional[str] = None,
    ):
        self.store = store
        self.id_generator = id_generator or SequentialIdGenerator(store)
        self.collection = collection or settings.CONTACTS_COLLECTION
        self.logger = logger

    async def add_contact(self, contact: Union[ContactCreate, Dict[str, Any]]) -> str:
        """
        Create a new contact

        Initials are derived from the name once, here.

        Args:
            contact: Validated ContactCreate or raw form data

        Returns:
            Id of the new contact ("contact-NNN")

        Raises:
            ValidationError: If name, email or telephone are invalid
            StoreError: If the write failed
        """
        if not isinstance(contact, ContactCreate):
            try:
                contact = ContactCreate.model_validate(contact)
            except PydanticValidationError as e:
                raise ValidationError(validation_message(e)) from e

        data = {
            "name": contact.name,
            "email": contact.email,
            "telephone": contact.telephone,
            "initials": generate_initials(contact.name),
            "color": contact.color or random_color(),
        }

        contact_id = await create_with_sequential_id(
            self.store, self.id_generator, self.collection, CONTACT_ID_PREFIX, data, "ContactService"
        )
        self.logger.info(f"[ContactService] Contact {contact.name} saved as {contact_id}")
        return contact_id

    async def update_contact(self, contact_id: str, updates: Union[ContactUpdate, Dict[str, Any]]) -> None:
        """
        Apply a partial update to a contact

        Renaming does not touch the stored initials unless they are given too.

        Raises:
            ValidationError: If the update is malformed
            DocumentNotFoundError: If the contact no longer exists
        """
        if not contact_id:
            raise ValidationError("contact id is required")
        if not isinstance(updates, ContactUpdate):
            try:
                updates = ContactUpdate.model_validate(updates)
            except PydanticValidationError as e:
                raise ValidationError(validation_message(e)) from e

        data = updates.to_document()
        if not data:
            self.logger.debug(f"[ContactService] Nothing to update for {contact_id}")
            return
        await self.store.update_document(self.collection, contact_id, data)
        self.logger.info(f"[ContactService] Contact {contact_id} updated: {sorted(data)}")

    async def delete_contact(self, contact_id: str) -> None:
        """
        Delete a contact

        Tasks keep the id in their assignments; readers drop unknown ids.
        """
        if not contact_id:
            return
        await self.store.delete_document(self.collection, contact_id)
        self.logger.info(f"[ContactService] Contact {contact_id} deleted")
