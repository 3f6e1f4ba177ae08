"""Role and status vocabularies shared by models, schemas and services."""

import enum


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    LIBRARIAN = "LIBRARIAN"
    PATRON = "PATRON"


STAFF_ROLES = (Role.ADMIN, Role.LIBRARIAN)


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class TransactionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
