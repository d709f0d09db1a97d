"""
Resource mixin for assignable production resources.

Observers, SNG units and generators share the same catalog shape: a unique
human-readable code (OB01, SNG-1, GEN-3), an optional display name and an
operational status. Only the association table and the validation rules
differ between kinds.
"""

from sqlalchemy import Column, Integer, String, Text

from backend.src.models.mixins.timestamps import TimestampMixin


class ResourceMixin(TimestampMixin):
    """
    Mixin providing the catalog columns of an assignable resource.

    Adds:
    - id: Primary key
    - code: Unique human-readable code (natural key for find-or-create)
    - name: Optional display name
    - status: available, busy or inactive
    - notes: Free-form notes
    """

    # Resource kind identifier ("observer", "sng", "generator")
    KIND = None

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    status = Column(String(20), default="available", nullable=False)
    notes = Column(Text, nullable=True)

    @property
    def display_name(self) -> str:
        """Name when set, code otherwise."""
        return self.name or self.code

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, code='{self.code}')>"

    def __str__(self) -> str:
        return self.code
