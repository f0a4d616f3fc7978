"""
Data Access Object Interface (DataAccessObject)

Abstract base class defining the contract the admin panel uses to read and
write entities of a type it only knows through its descriptor.

Implementation guide:
- All operations are async and run in their own transactional scope
- Implementations own one backend handle and one entity definition, no entity state
- Create/update input is always an external field map, never a typed entity
- Each implementation accepts exactly one primary key variant (see keys.py)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, List, Mapping, Optional, Tuple, TypeVar

from adminpanel.core.exceptions import ConfigurationFault, InvalidValue
from adminpanel.database.descriptor import EntityDescriptor, FieldDescriptor
from adminpanel.database.keys import PrimaryKey, is_primary_key

T = TypeVar("T")


@dataclass(frozen=True)
class Credentials:
    """Username and stored (hashed) password of a principal."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r})"


class DataAccessObject(ABC, Generic[T]):
    """
    Abstract interface for CRUD over one registered entity type.

    Attributes:
        lookup_field: Field used by find() to locate a principal
        password_field: Field returned alongside it as the stored password
    """

    lookup_field: str = "username"
    password_field: str = "password"

    def __init__(self):
        self._descriptor: Optional[EntityDescriptor] = None

    @property
    def descriptor(self) -> EntityDescriptor:
        """
        Descriptor of the managed entity, built on first use.

        Raises:
            ConfigurationFault: If the entity definition cannot be introspected
        """
        if self._descriptor is None:
            self._descriptor = self._build_descriptor()
        return self._descriptor

    @property
    def entity_name(self) -> str:
        return self.descriptor.name

    @abstractmethod
    def _build_descriptor(self) -> EntityDescriptor:
        """Introspect the backend's native entity definition."""

    @abstractmethod
    def wrap_key(self, value: Any) -> PrimaryKey:
        """
        Produce this backend's native key variant from a raw scalar.

        Raises:
            InvalidValue: If the scalar is not a valid key for the entity
            ConfigurationFault: If the entity has no primary key
        """

    @abstractmethod
    def unwrap_key(self, key: PrimaryKey) -> Any:
        """
        Extract the scalar of a native key variant for use in a predicate.

        Raises:
            TypeError: If ``key`` is not this backend's variant
        """

    def key_value(self, id: Any, id_is_wrapped: bool) -> Any:
        """
        Resolve the ``id`` argument of find_by_id/delete to a predicate value.

        Raises:
            TypeError: If a wrapped key is passed as raw or vice versa
        """
        if id_is_wrapped:
            return self.unwrap_key(id)
        if is_primary_key(id):
            raise TypeError(
                f"Got {type(id).__name__} for {self.entity_name} but id_is_wrapped=False; "
                "pass the raw value or set id_is_wrapped=True"
            )
        return self.unwrap_key(self.wrap_key(id))

    def update_key_value(self, fields: Mapping[str, Any]) -> Any:
        """
        Resolve the mandatory "id" entry of an update field map.

        Raises:
            InvalidValue: If "id" is absent or not coercible to the key type
        """
        if "id" not in fields:
            raise InvalidValue(
                f"Update of {self.entity_name} requires an 'id' entry",
                field="id",
            )
        return self.unwrap_key(self.wrap_key(fields["id"]))

    def credential_fields(self) -> Tuple[FieldDescriptor, FieldDescriptor]:
        """
        The (lookup, password) fields used by find().

        Raises:
            ConfigurationFault: If the entity does not carry both fields
        """
        lookup = self.descriptor.field_for(self.lookup_field)
        password = self.descriptor.field_for(self.password_field)
        if lookup is None or password is None:
            raise ConfigurationFault(
                f"{self.entity_name} has no '{self.lookup_field}'/'{self.password_field}' "
                "fields and cannot be used for authentication"
            )
        return lookup, password

    @abstractmethod
    async def find_by_id(self, id: Any, id_is_wrapped: bool = False) -> Optional[T]:
        """
        Find an entity by its primary key.

        Args:
            id: Raw key value, or this backend's key variant when id_is_wrapped
            id_is_wrapped: Whether ``id`` is already a native key variant

        Returns:
            The entity, or None if no entity matches

        Raises:
            ConfigurationFault: If the entity has no primary key
            TypeError: If the key variant does not match id_is_wrapped
        """

    @abstractmethod
    async def find_all(self) -> List[Optional[T]]:
        """
        Return every entity in backend-native order.

        Raises:
            ConfigurationFault: If the entity has no primary key
        """

    @abstractmethod
    async def find(self, lookup_key: str) -> Optional[Credentials]:
        """
        Look up a principal by its lookup field (username by default).

        Returns:
            Credentials of the match, or None if nobody matches
        """

    @abstractmethod
    async def save(self, fields: Mapping[str, Any]) -> T:
        """
        Create an entity from a field map and return it as stored.

        Any "id" entry is ignored; keys are always generated by the backend.

        Raises:
            InvalidValue: If a value cannot be coerced
            NotFound: If the new entity cannot be re-read
        """

    @abstractmethod
    async def update(self, fields: Mapping[str, Any]) -> T:
        """
        Apply a partial update to the entity named by fields["id"].

        Raises:
            InvalidValue: If "id" is missing/uncoercible or a value cannot be coerced
            NotFound: If no entity has that key
        """

    @abstractmethod
    async def delete(self, id: Any, id_is_wrapped: bool = False) -> T:
        """
        Remove one entity and return it.

        Raises:
            NotFound: If no entity has that key
        """

    @abstractmethod
    async def create_table(self) -> None:
        """Create the backing table or collection if it does not exist yet."""
