"""Entity store adapter.

The coordination core never talks to the ORM directly. It reads and writes
documents through :class:`DjangoEntityStore`, whose only write primitive for
existing records is :meth:`DjangoEntityStore.atomic_update`: a single-row
read-modify-write that runs under a row lock, checks an optional
precondition and applies field operations. No business rules live here.
"""

import logging

from django.db import DEFAULT_DB_ALIAS, OperationalError, transaction
from django.db.models import Count
from django.utils import timezone

from .exceptions import Conflict, NotFound
from .models import ActorProfile, FoodDonation, FoodRequest, Issue, Opportunity

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "issues": Issue,
    "opportunities": Opportunity,
    "food_donations": FoodDonation,
    "food_requests": FoodRequest,
    "actor_profiles": ActorProfile,
}

FILTER_LOOKUPS = {
    "==": "",
    "in": "__in",
    ">": "__gt",
    ">=": "__gte",
    "<": "__lt",
    "<=": "__lte",
}


class FieldOp:
    def apply(self, current):
        raise NotImplementedError


class Set(FieldOp):
    def __init__(self, value):
        self.value = value

    def apply(self, current):
        return self.value

    def __repr__(self):
        return f"Set({self.value!r})"


class Increment(FieldOp):
    def __init__(self, amount):
        self.amount = amount

    def apply(self, current):
        return (current or 0) + self.amount

    def __repr__(self):
        return f"Increment({self.amount!r})"


class ArrayUnion(FieldOp):
    """Append values not already present, keeping the stored order."""

    def __init__(self, *values):
        self.values = values

    def apply(self, current):
        result = list(current or [])
        for value in self.values:
            if value not in result:
                result.append(value)
        return result

    def __repr__(self):
        return f"ArrayUnion{self.values!r}"


class ArrayRemove(FieldOp):
    def __init__(self, *values):
        self.values = values

    def apply(self, current):
        return [value for value in (current or []) if value not in self.values]

    def __repr__(self):
        return f"ArrayRemove{self.values!r}"


class ServerTimestamp(FieldOp):
    def apply(self, current):
        return timezone.now()

    def __repr__(self):
        return "ServerTimestamp()"


class Excludes:
    """Precondition that holds while a list field does not contain ``value``."""

    def __init__(self, value):
        self.value = value

    def matches(self, current) -> bool:
        return self.value not in (current or [])

    def __repr__(self):
        return f"Excludes({self.value!r})"


def is_lock_contention(error) -> bool:
    """SQLite reports a write lock it could not take as an OperationalError."""
    message = str(error).lower()
    return "database is locked" in message or "database table is locked" in message


def precondition_holds(current, expected) -> bool:
    if isinstance(expected, Excludes):
        return expected.matches(current)
    if isinstance(expected, (set, frozenset)):
        return set(current or []) == expected
    return current == expected


class DjangoEntityStore:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def model_for(self, collection):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    def _objects(self, collection):
        return self.model_for(collection).objects.using(self.using)

    def _lookups(self, filters):
        lookups = {}
        for field, op, value in filters:
            try:
                suffix = FILTER_LOOKUPS[op]
            except KeyError:
                raise ValueError(f"Unsupported filter operator: {op}") from None
            lookups[f"{field}{suffix}"] = list(value) if op == "in" else value
        return lookups

    def get(self, collection, pk):
        return self._objects(collection).filter(pk=pk).first()

    def query(self, collection, filters=(), order=None, limit=None):
        """Return records matching every ``(field, op, value)`` filter.

        ``order`` takes ORM ordering names (``"-timestamp"``); ``limit`` caps
        the result after ordering.
        """
        queryset = self._objects(collection).filter(**self._lookups(filters))
        if order:
            queryset = queryset.order_by(*([order] if isinstance(order, str) else order))
        if limit is not None:
            queryset = queryset[:limit]
        return list(queryset)

    def create(self, collection, **fields):
        instance = self._objects(collection).create(**fields)
        logger.debug("Created %s/%s", collection, instance.pk)
        return instance

    def atomic_update(self, collection, pk, changes, precondition=None):
        """Apply ``changes`` to one record as a single atomic step.

        ``changes`` maps field names to :class:`FieldOp` instances; plain
        values are treated as :class:`Set`. ``precondition`` maps field names
        to expected values and is checked against the locked row. Raises
        :class:`NotFound` when the record is missing and :class:`Conflict`
        when the precondition no longer holds.
        """
        try:
            with transaction.atomic(using=self.using):
                instance = self._objects(collection).select_for_update().filter(pk=pk).first()
                if instance is None:
                    raise NotFound(f"No {collection} record with id {pk}.")

                for field, expected in (precondition or {}).items():
                    if not precondition_holds(getattr(instance, field), expected):
                        logger.debug(
                            "Precondition failed on %s/%s: %s is %r, expected %r",
                            collection,
                            pk,
                            field,
                            getattr(instance, field),
                            expected,
                        )
                        raise Conflict()

                for field, op in changes.items():
                    if not isinstance(op, FieldOp):
                        op = Set(op)
                    setattr(instance, field, op.apply(getattr(instance, field)))
                instance.save(using=self.using, update_fields=list(changes))
        except OperationalError as error:
            if not is_lock_contention(error):
                raise
            logger.warning("Write to %s/%s lost a lock race: %s", collection, pk, error)
            raise Conflict() from error
        return instance

    def count_by(self, collection, field, filters=()):
        """Count matching records grouped by ``field``, in the database."""
        rows = (
            self._objects(collection)
            .filter(**self._lookups(filters))
            .values(field)
            .annotate(total=Count("pk"))
            .order_by()
        )
        return {row[field]: row["total"] for row in rows}
