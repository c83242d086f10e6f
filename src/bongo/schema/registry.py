"""Field metadata registry for Bongo."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from bongo.schema.fields import declarations_from_model
from bongo.schema.models import RESERVED_FIELDS, FieldDeclaration

if TYPE_CHECKING:
    from pydantic import BaseModel

logger = logging.getLogger(__name__)


class FieldRegistry:
    """Registry mapping shape names to their ordered field declarations.
    
    The FieldRegistry:
    - Keeps one ordered set of declarations per shape
    - Lets later declarations overwrite earlier ones by field name
    - Keeps the position of the first declaration of each field
    - Derives shapes from BongoDoc models
    
    Example:
        ```python
        registry = FieldRegistry()
        
        # Declare fields one by one
        registry.declare_field("users", "name", FieldDeclaration(unique=True))
        registry.declare_field("users", "age", FieldDeclaration(type=StorageType.INTEGER))
        
        # Or register a model
        registry.register_model(User)
        
        registry.declarations_for("users")
        ```
    """

    def __init__(self) -> None:
        """Initialize the registry."""
        # dicts keep insertion order, which is the column-add order
        self._shapes: dict[str, dict[str, FieldDeclaration]] = {}

    def declare_field(
        self,
        shape: str,
        field_name: str,
        declaration: Optional[FieldDeclaration] = None,
    ) -> None:
        """Register or overwrite a field declaration.
        
        Reserved names (`_id`, `key`) are skipped with a warning.
        
        Args:
            shape: Shape name
            field_name: Field (column) name
            declaration: Field options (TEXT, nullable, not unique if not provided)
        """
        if field_name in RESERVED_FIELDS:
            logger.warning(f"Ignoring reserved field '{field_name}' on shape '{shape}'")
            return
        
        declaration = (declaration or FieldDeclaration()).model_copy(
            update={"name": field_name}
        )
        
        fields = self._shapes.setdefault(shape, {})
        fields[field_name] = declaration
        logger.debug(f"Declared field {shape}.{field_name}: {declaration.type.value}")

    def register_shape(
        self,
        shape: str,
        fields: Iterable[FieldDeclaration],
    ) -> None:
        """Declare several named fields at once.
        
        Args:
            shape: Shape name
            fields: Declarations with their `name` set
            
        Raises:
            ValueError: If a declaration has no name
        """
        self._shapes.setdefault(shape, {})
        for declaration in fields:
            if not declaration.name:
                raise ValueError(f"Field declaration for shape '{shape}' has no name")
            self.declare_field(shape, declaration.name, declaration)

    def register_model(
        self,
        model: type["BaseModel"],
        shape: Optional[str] = None,
    ) -> str:
        """Register a shape derived from a pydantic model.
        
        Args:
            model: Model class (usually a BongoDoc subclass)
            shape: Shape name (defaults to the class name)
            
        Returns:
            The shape name used
        """
        shape_name = shape or model.__name__
        self.register_shape(shape_name, declarations_from_model(model))
        return shape_name

    def declarations_for(self, shape: str) -> list[FieldDeclaration]:
        """Get the declarations of a shape in first-declared order.
        
        Args:
            shape: Shape name
            
        Returns:
            List of declarations (empty for unknown shapes)
        """
        return list(self._shapes.get(shape, {}).values())

    @property
    def shape_names(self) -> list[str]:
        """Get list of registered shape names."""
        return list(self._shapes.keys())

    def __contains__(self, shape: str) -> bool:
        """Check if a shape is registered."""
        return shape in self._shapes

    def __len__(self) -> int:
        """Get number of shapes."""
        return len(self._shapes)

    def __repr__(self) -> str:
        return f"FieldRegistry(shapes={self.shape_names})"
