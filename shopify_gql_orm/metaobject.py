"""Models backed by Shopify metaobjects."""

from __future__ import annotations

from typing import Any, Dict, Optional

import inflection

from shopify_gql_orm.attributes import Attribute
from shopify_gql_orm.model import ShopifyModel

METAOBJECT_GQL_TYPE = "Metaobject"
METAOBJECT_CORE_FIELDS = (
    Attribute("id"),
    Attribute("handle"),
    Attribute("type"),
    Attribute("display_name"),
)


class MetaobjectModel(ShopifyModel):
    """A model over one metaobject definition.

    Every metaobject shares the ``Metaobject`` GraphQL type, so records are
    found with ``metaobject(id:)`` and listed with
    ``metaobjects(type: "<metaobject_type>")``. Fields are declared with
    ``MetaobjectField`` and read from ``field(key: "...")``; ``id``,
    ``handle``, ``type`` and ``display_name`` are always selected.

    Example:
        class Provider(MetaobjectModel):
            metaobject_type = "provider"
            fields = [
                MetaobjectField("description"),
                MetaobjectField("rating", type="integer"),
            ]

        Provider.where(display_name="Acme").first()
    """

    metaobject_type: Optional[str] = None

    def __init_subclass__(cls, **kwargs):
        cls.gql_type = METAOBJECT_GQL_TYPE
        if not cls.__dict__.get("metaobject_type"):
            cls.metaobject_type = inflection.underscore(cls.__name__)
        cls.fields = [*METAOBJECT_CORE_FIELDS, *cls.fields]
        super().__init_subclass__(**kwargs)

    @classmethod
    def collection_arguments(cls) -> Dict[str, Any]:
        return {"type": cls.metaobject_type}
