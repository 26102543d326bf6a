"""
Template State Holder.

WHAT: In-memory editor state for one template type, with the edit
operations an editor form performs (set field, edit nested section,
add/remove/update list items) and the save-time checks.

WHY: Every editor follows the same edit -> preview -> save loop. Keeping the
rules here means required lists never become empty, whichever form drives
the edits.

HOW: The held pydantic model is never mutated. Each edit dumps the current
state, merges the change and validates a fresh model, so a previously read
state object (e.g. one being rendered) never changes under the caller.
Validation failures are returned as values (EditResult), not raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from solodesk.core.exceptions import ValidationError
from solodesk.models.email_template import TemplateType
from solodesk.schemas.template_state import TemplateState, state_model_for


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditResult:
    """Outcome of an edit or save check; error is a user-facing message."""

    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "EditResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "EditResult":
        return cls(success=False, error=error)


class TemplateStateHolder:
    """
    Holds and edits the state of one template.

    Example:
        holder = TemplateStateHolder("welcome")
        holder.set_field("tagline", "Design that works")
        result = holder.remove_item("services", 0)
    """

    def __init__(
        self,
        template_type: Union[TemplateType, str],
        state: Optional[TemplateState] = None,
    ):
        self.model: Type[TemplateState] = state_model_for(template_type)
        self.template_type = self.model.TEMPLATE_TYPE
        self._state = state if state is not None else self.model()

    @property
    def state(self) -> TemplateState:
        return self._state

    @property
    def display_name(self) -> str:
        return self.model.DISPLAY_NAME

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _replace(self, changes: Mapping[str, Any]) -> None:
        """Validate a new state from the current one plus changes."""
        data = self._state.model_dump()
        data.update(changes)
        self._state = self.model.model_validate(data)

    def _field_name(self, name: str) -> str:
        """Accept either the python name or the camelCase wire name."""
        if name in self.model.model_fields:
            return name
        for field_name, info in self.model.model_fields.items():
            if info.alias == name:
                return field_name
        raise ValidationError(
            message=f"Unknown field '{name}' for {self.template_type.value} template",
            field=name,
        )

    def _list(self, field: str) -> List[Any]:
        value = getattr(self._state, field)
        if not isinstance(value, list):
            raise ValidationError(message=f"Field '{field}' is not a list", field=field)
        return list(value)

    @staticmethod
    def _as_data(value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump()
        return value

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_field(self, name: str, value: Any) -> TemplateState:
        """
        Replace a top-level field.

        Raises:
            ValidationError: If the field does not exist or the value has
                the wrong shape
        """
        field = self._field_name(name)
        try:
            self._replace({field: self._as_data(value)})
        except PydanticValidationError as e:
            raise ValidationError(message=f"Invalid value for '{name}'", field=name, error=str(e))
        return self._state

    def set_nested(self, section: str, field: str, value: Any) -> TemplateState:
        """
        Replace one field of a nested section (e.g. header.title).

        The section is shallow-merged: its other fields are kept.
        """
        section_name = self._field_name(section)
        current = getattr(self._state, section_name)
        if not isinstance(current, BaseModel):
            raise ValidationError(message=f"Field '{section}' is not a section", field=section)

        section_data = current.model_dump()
        inner = field
        if inner not in type(current).model_fields:
            inner = next(
                (n for n, i in type(current).model_fields.items() if i.alias == field),
                None,
            )
            if inner is None:
                raise ValidationError(
                    message=f"Unknown field '{field}' in '{section}'",
                    field=f"{section}.{field}",
                )
        section_data[inner] = value
        try:
            self._replace({section_name: section_data})
        except PydanticValidationError as e:
            raise ValidationError(
                message=f"Invalid value for '{section}.{field}'",
                field=f"{section}.{field}",
                error=str(e),
            )
        return self._state

    def add_item(self, field: str, value: Any = None) -> EditResult:
        """Append an item; without a value the type's default new item is used."""
        name = self._field_name(field)
        items = self._list(name)
        if value is None:
            rule = self.model.REQUIRED_LISTS.get(name)
            value = rule.new_item if rule else ""
        items.append(self._as_data(value))
        self._replace({name: [self._as_data(i) for i in items]})
        return EditResult.ok()

    def remove_item(self, field: str, index: int) -> EditResult:
        """
        Remove the item at index.

        Removing the last item of a required list is refused with the
        list's message; the state is left unchanged.
        """
        name = self._field_name(field)
        items = self._list(name)
        rule = self.model.REQUIRED_LISTS.get(name)
        if rule and len(items) <= 1:
            return EditResult.failed(rule.remove_error)
        if index < 0 or index >= len(items):
            return EditResult.failed(f"No item at position {index}.")
        del items[index]
        self._replace({name: [self._as_data(i) for i in items]})
        return EditResult.ok()

    def update_item(self, field: str, index: int, value: Any = None, **changes: Any) -> EditResult:
        """
        Update the item at index.

        Plain list items are replaced by value. Structured items (invoice
        line items) are merged with changes, e.g.
        update_item("items", 0, unitPrice="120.00").
        """
        name = self._field_name(field)
        items = [self._as_data(i) for i in self._list(name)]
        if index < 0 or index >= len(items):
            return EditResult.failed(f"No item at position {index}.")

        if changes:
            if not isinstance(items[index], dict):
                raise ValidationError(message=f"Items of '{field}' have no fields", field=field)
            merged = dict(items[index])
            item_model = type(getattr(self._state, name)[index])
            for key, new_value in changes.items():
                target = key
                if target not in item_model.model_fields:
                    target = next(
                        (n for n, i in item_model.model_fields.items() if i.alias == key),
                        key,
                    )
                merged[target] = new_value
            items[index] = merged
        else:
            items[index] = self._as_data(value)

        try:
            self._replace({name: items})
        except PydanticValidationError as e:
            raise ValidationError(message=f"Invalid item for '{field}'", field=field, error=str(e))
        return EditResult.ok()

    # ------------------------------------------------------------------
    # Save support
    # ------------------------------------------------------------------

    def validate_for_save(self) -> EditResult:
        """First failing save check: blank subject, then empty required lists."""
        if not self._state.subject.strip():
            return EditResult.failed(self.model.SUBJECT_ERROR)
        for name, rule in self.model.REQUIRED_LISTS.items():
            if not getattr(self._state, name):
                return EditResult.failed(rule.save_error)
        return EditResult.ok()

    def load_existing(self, template: Mapping[str, Any]) -> TemplateState:
        """
        Merge a stored template over the current state.

        Only non-empty stored values replace current ones, so a template
        saved before a field existed keeps that field's default.

        Args:
            template: Stored template as returned by the API (camelCase)
        """
        changes: Dict[str, Any] = {}
        for field_name, info in self.model.model_fields.items():
            key = info.alias or field_name
            value = template.get(key, template.get(field_name))
            if value in (None, "", [], {}):
                continue
            changes[field_name] = value

        if not changes:
            return self._state

        try:
            self._replace(changes)
        except PydanticValidationError:
            logger.warning(
                "Stored %s template %s has invalid fields; keeping current state",
                self.template_type.value,
                template.get("id"),
                exc_info=True,
            )
        return self._state

    def to_payload(self, html: str, text: Optional[str] = None) -> Dict[str, Any]:
        """
        Body for POST/PUT /api/email-templates.

        Args:
            html: Generated HTML document
            text: Plain text version (defaults to the state's text field)
        """
        payload: Dict[str, Any] = {
            "type": self.template_type.value,
            "name": self.model.DISPLAY_NAME,
            "subject": self._state.subject,
            "html": html,
            "text": text if text is not None else getattr(self._state, "text", ""),
            "isDefault": True,
            "isActive": True,
        }
        payload.update(self._state.structured_fields())
        return payload
