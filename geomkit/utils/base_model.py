# geomkit/utils/base_model.py
import logging
from typing import Any, Optional, Type, TypeVar, cast
from pydantic import BaseModel, PrivateAttr, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar('T', bound='GeometryModel')


class ReadOnlyModelError(TypeError):
    """Raised when a field of a locked model is assigned."""


class GeometryModel(BaseModel):
    """
    Base class for all geometric value types.

    All geometric models inherit from this class to get consistent behavior:
    - Validation: field assignment goes through the same validators as construction
    - Locking: shared constants can be locked so that nobody mutates them in place
    - Copyability: easy creation of modified copies via with_changes()
    """
    model_config = {
        "validate_assignment": True,
    }

    _locked: bool = PrivateAttr(default=False)

    @classmethod
    def create(cls: Type[T], *args: Any, **kwargs: Any) -> Optional[T]:
        """
        Factory method that returns None instead of raising on invalid input.

        Used wherever a degenerate result (zero-length direction, collinear
        points) should surface as "no result" rather than an exception.
        """
        try:
            return cls(*args, **kwargs)
        except ValidationError as exc:
            logger.debug(f"Could not create {cls.__name__}: {exc.errors()[0]['msg']}")
            return None

    def lock(self: T) -> T:
        """
        Make this instance (and any nested geometric models) read-only.

        Returns:
            The same instance, to allow `CONSTANT = Model(...).lock()`
        """
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, GeometryModel):
                value.lock()
        self._locked = True
        return self

    @property
    def is_locked(self) -> bool:
        """Whether assignments to this instance are rejected."""
        return self._locked

    def __eq__(self, other: Any) -> bool:
        # Exact field-wise comparison; the lock state is not part of the value
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in type(self).model_fields)

    __hash__ = None

    def __setattr__(self, name: str, value: Any) -> None:
        """Override attribute setting to protect locked instances"""
        if not name.startswith("_") and self._locked:
            raise ReadOnlyModelError(
                f"{type(self).__name__} instance is read-only; use dup() to get a mutable copy"
            )
        super().__setattr__(name, value)

    def with_changes(self: T, **changes: Any) -> T:
        """
        Create a new instance with specified changes.

        Args:
            **changes: Keyword arguments with field values to change

        Returns:
            New (unlocked) instance with updated values

        Raises:
            ValueError: If an invalid field name is provided
        """
        current_data = {name: getattr(self, name) for name in type(self).model_fields}

        for key, value in changes.items():
            if key not in current_data:
                raise ValueError(f"Invalid field: {key}")
            current_data[key] = value

        cls = self.__class__
        return cast(T, cls.model_validate(current_data))
