"""
ListRenewalHistoryQuery.

Query for an organization's renewal history.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class ListRenewalHistoryQuery:
    """Query for the renewal history of an organization's license."""

    actor: Actor
    organization_id: uuid.UUID
