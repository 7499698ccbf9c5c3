"""
User Directory Resolver

Resolves member email addresses to directory users. The Graph user search
accepts only a few disjunctive terms per `mail in (...)` filter, so emails
are looked up in fixed-size batches.
"""

import logging
from typing import List, Optional

from app.config import get_settings
from app.integrations.graph.client import GraphClient
from app.integrations.graph.models import DirectoryUser
from app.utils.helpers import chunk_list, require

logger = logging.getLogger(__name__)


class UserDirectoryResolver:
    """Batch email -> user lookups against the directory."""

    def __init__(self, batch_size: Optional[int] = None):
        self.batch_size = batch_size or get_settings().user_lookup_batch_size

    async def resolve_users(
        self, client: GraphClient, emails: List[str]
    ) -> List[DirectoryUser]:
        """
        Resolve emails to users, one lookup per batch.

        Results are concatenated in batch order. An email with no match simply
        contributes no record; it is not an error.

        Raises:
            PreconditionFailed: If emails is empty
        """
        require(emails, "Email member not found.")

        batches = chunk_list(list(emails), self.batch_size)
        users: List[DirectoryUser] = []

        for batch in batches:
            found = await client.find_users_by_mail(batch)
            logger.debug(f"Directory lookup {batch} -> {len(found)} users")
            users.extend(found)

        logger.info(
            f"Resolved {len(users)} of {len(emails)} emails in {len(batches)} lookups"
        )
        return users
