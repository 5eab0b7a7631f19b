"""Field type registry with storage and edit-component defaults."""

from dataclasses import dataclass


@dataclass
class FieldType:
    name: str
    storage_type: str
    edit_component: str


# Built-in field types
FIELD_TYPES: dict[str, FieldType] = {
    "id": FieldType(name="id", storage_type="TEXT", edit_component="TextInput"),
    "string": FieldType(name="string", storage_type="TEXT", edit_component="TextInput"),
    "text": FieldType(name="text", storage_type="TEXT", edit_component="TextArea"),
    "integer": FieldType(name="integer", storage_type="INTEGER", edit_component="NumberInput"),
    "number": FieldType(name="number", storage_type="REAL", edit_component="NumberInput"),
    "boolean": FieldType(name="boolean", storage_type="INTEGER", edit_component="Checkbox"),
    "datetime": FieldType(name="datetime", storage_type="TEXT", edit_component="DateTimePicker"),
    "relation": FieldType(
        name="relation",
        storage_type="TEXT",  # Stores the foreign key of a belongsTo relation
        edit_component="Browser",
    ),
    "image": FieldType(
        name="image",
        storage_type="TEXT",  # Path relative to the media URL
        edit_component="MediaPicker",
    ),
}


def get_field_type(type_name: str) -> FieldType:
    """Get field type definition, defaulting to string if unknown."""
    return FIELD_TYPES.get(type_name, FIELD_TYPES["string"])


def get_storage_type(type_name: str) -> str:
    """Get SQLite storage type for a field type."""
    return get_field_type(type_name).storage_type
