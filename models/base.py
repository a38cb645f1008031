"""Basisklasse für alle API-Datenmodelle (Pydantic v2).

Der Server liefert camelCase-Felder; im Python-Code wird snake_case verwendet.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Modell mit camelCase-Aliasen, unbekannte Felder werden ignoriert."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
