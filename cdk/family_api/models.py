"""
Configuration model for the entity REST API.

One EntityConfig describes a whole deployment: the entity (table) name, its
partition key, and which API operations are exposed. Everything else in the
resource graph is derived from it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .errors import ConfigurationError


class KeyType(Enum):
    """DynamoDB scalar types allowed for the partition key."""

    STRING = "S"
    NUMBER = "N"

    @classmethod
    def parse(cls, value: "str | KeyType") -> "KeyType":
        """Parse a key type from its name ("STRING") or attribute code ("S")."""
        if isinstance(value, KeyType):
            return value
        normalized = str(value).strip().upper()
        for key_type in cls:
            if normalized in (key_type.name, key_type.value):
                return key_type
        raise ConfigurationError(f"Unknown key type: {value}", allowed=[k.name for k in cls])


class PayloadShape(Enum):
    """Top-level payload field a storage operation addresses its data through."""

    KEY = "Key"
    ITEM = "Item"
    NONE = "None"


class StorageOperation(Enum):
    """DynamoDB API actions the gateway calls directly."""

    SCAN = "Scan"
    GET_ITEM = "GetItem"
    PUT_ITEM = "PutItem"
    DELETE_ITEM = "DeleteItem"

    @property
    def action(self) -> str:
        """IAM action name, e.g. dynamodb:GetItem."""
        return f"dynamodb:{self.value}"

    @property
    def role_label(self) -> str:
        return _ROLE_LABELS[self]

    @property
    def payload_shape(self) -> PayloadShape:
        return _PAYLOAD_SHAPES[self]

    @property
    def client_method(self) -> str:
        """boto3 DynamoDB client method name, e.g. get_item."""
        return _CLIENT_METHODS[self]


_ROLE_LABELS = {
    StorageOperation.SCAN: "Scan",
    StorageOperation.GET_ITEM: "Get",
    StorageOperation.PUT_ITEM: "Put",
    StorageOperation.DELETE_ITEM: "Delete",
}

_PAYLOAD_SHAPES = {
    StorageOperation.SCAN: PayloadShape.NONE,
    StorageOperation.GET_ITEM: PayloadShape.KEY,
    StorageOperation.PUT_ITEM: PayloadShape.ITEM,
    StorageOperation.DELETE_ITEM: PayloadShape.KEY,
}

_CLIENT_METHODS = {
    StorageOperation.SCAN: "scan",
    StorageOperation.GET_ITEM: "get_item",
    StorageOperation.PUT_ITEM: "put_item",
    StorageOperation.DELETE_ITEM: "delete_item",
}


class ValueSource(Enum):
    """Where a mapped attribute takes its value from at request time.

    The enum value is the Velocity expression API Gateway evaluates.
    """

    PATH_ID = "$method.request.path.id"
    REQUEST_ID = "$context.requestId"
    BODY = "$input.path('$.{field}')"


class ApiOperation(Enum):
    """Routes the API can expose, one verb mapping each."""

    LIST = "list"
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def http_method(self) -> str:
        return _ROUTES[self][0]

    @property
    def is_item_route(self) -> bool:
        """True for routes on the single-item path (collection/{id})."""
        return _ROUTES[self][1]

    @property
    def storage_operation(self) -> StorageOperation:
        return _ROUTES[self][2]

    @property
    def key_source(self) -> Optional[ValueSource]:
        """Source of the partition key value, None when the route has no key."""
        return _ROUTES[self][3]

    @classmethod
    def parse_set(cls, value: "str | Iterable[str | ApiOperation]") -> frozenset["ApiOperation"]:
        """Parse "list,create,read" (or an iterable of names) into a set of operations."""
        names = value.split(",") if isinstance(value, str) else value
        operations = set()
        for name in names:
            if isinstance(name, ApiOperation):
                operations.add(name)
                continue
            normalized = name.strip().lower()
            if not normalized:
                continue
            try:
                operations.add(cls(normalized))
            except ValueError:
                raise ConfigurationError(
                    f"Unknown API operation: {name}", allowed=[op.value for op in cls]
                ) from None
        return frozenset(operations)


# operation -> (http method, item route, storage operation, key source)
_ROUTES = {
    ApiOperation.LIST: ("GET", False, StorageOperation.SCAN, None),
    ApiOperation.CREATE: ("POST", False, StorageOperation.PUT_ITEM, ValueSource.REQUEST_ID),
    ApiOperation.READ: ("GET", True, StorageOperation.GET_ITEM, ValueSource.PATH_ID),
    ApiOperation.UPDATE: ("PUT", True, StorageOperation.PUT_ITEM, ValueSource.PATH_ID),
    ApiOperation.DELETE: ("DELETE", True, StorageOperation.DELETE_ITEM, ValueSource.PATH_ID),
}

ALL_OPERATIONS = frozenset(ApiOperation)


class NamingConvention(Enum):
    """Word separator used by attribute and body field names."""

    HYPHENATED = "-"
    SNAKE_CASE = "_"

    @classmethod
    def of(cls, name: str) -> Optional["NamingConvention"]:
        """Detect the convention of a name, None for single-word names."""
        found = [convention for convention in cls if convention.value in name]
        if len(found) > 1:
            raise ConfigurationError(f"Field name mixes naming conventions: {name}", field=name)
        return found[0] if found else None


DEFAULT_ITEM_FIELDS: tuple[tuple[str, str], ...] = (
    ("firstname", "FirstName"),
    ("lastname", "LastName"),
)
DEFAULT_BAD_INPUT_MESSAGE = "Shoddy input!"
DEFAULT_SERVER_ERROR_MESSAGE = "Internal Service Error!"


@dataclass(frozen=True)
class EntityConfig:
    """Parameters of one deployment.

    Attributes:
        entity_name: Collection name, used for the path and resource names
        key_field_name: Partition key attribute; defaults to "<entity>-id"
        key_type: Partition key type
        operations: API operations to expose
        item_fields: (request body field, item attribute) pairs written by create/update
        bad_input_message: Error body message for inward 400 responses
        server_error_message: Error body message for inward 5xx responses
    """

    entity_name: str = "family"
    key_field_name: Optional[str] = None
    key_type: KeyType = KeyType.STRING
    operations: frozenset[ApiOperation] = ALL_OPERATIONS
    item_fields: tuple[tuple[str, str], ...] = DEFAULT_ITEM_FIELDS
    bad_input_message: str = DEFAULT_BAD_INPUT_MESSAGE
    server_error_message: str = DEFAULT_SERVER_ERROR_MESSAGE

    @property
    def key_attribute(self) -> str:
        return self.key_field_name or f"{self.entity_name}-id"

    @property
    def collection_path(self) -> str:
        return f"/{self.entity_name}"

    @property
    def item_path(self) -> str:
        return f"/{self.entity_name}/{{id}}"

    def check_naming_convention(self) -> Optional[NamingConvention]:
        names = [self.key_attribute] + [body_field for body_field, _ in self.item_fields]
        conventions = {NamingConvention.of(name) for name in names} - {None}
        if len(conventions) > 1:
            raise ConfigurationError(
                "Key attribute and body fields must share one naming convention",
                fields=names,
            )
        return conventions.pop() if conventions else None

    @property
    def storage_operations(self) -> frozenset[StorageOperation]:
        return frozenset(op.storage_operation for op in self.operations)

    def validate(self) -> "EntityConfig":
        """Check the configuration can produce a consistent graph.

        Returns:
            The config itself, for chaining

        Raises:
            ConfigurationError: On the first problem found
        """
        if not self.entity_name or "/" in self.entity_name:
            raise ConfigurationError("Entity name must be a non-empty path segment", entity=self.entity_name)
        if not self.operations:
            raise ConfigurationError("At least one API operation must be enabled")

        self.check_naming_convention()

        attributes = [attribute for _, attribute in self.item_fields]
        if self.key_attribute in attributes:
            raise ConfigurationError(
                "Key attribute cannot also be written from the request body",
                key=self.key_attribute,
            )
        if len(set(attributes)) != len(attributes):
            raise ConfigurationError("Item attributes must be unique", attributes=attributes)

        if ApiOperation.CREATE in self.operations and self.key_type is not KeyType.STRING:
            raise ConfigurationError(
                "Create generates request-id keys and requires a STRING key",
                key_type=self.key_type.name,
            )
        return self
