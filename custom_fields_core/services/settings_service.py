"""
Catalog and quote settings, stored as built-in option sets.

The settings screens edit the labels, colors and order of existing options;
they never add or remove options.
"""

from typing import Any, Dict, Union

from ..constants import DEFAULT_COLOR, DEFAULT_UNIT_TYPES, BuiltinOptionSet
from ..context.operation_context import operation
from ..db.db_option_set_models import OptionSet, OptionSetOption
from ..exceptions import not_found
from ..schemas.settings_schema import (
    CatalogSettings,
    CatalogType,
    QuoteSettings,
    QuoteStatus,
    UnitType,
)
from .base_service import SessionManagedService
from .option_set_service import OptionSetService


class SettingsService(SessionManagedService):
    """
    Reads and writes the settings backed by built-in option sets.
    """

    def _option_sets(self) -> OptionSetService:
        return OptionSetService(session=self.session, logger=self.logger)

    def _update_options(
        self, tenant_id: str, name: BuiltinOptionSet, updates: Dict[str, Dict[str, Any]]
    ) -> int:
        """Apply per-key column updates to a set's options. Returns the rows touched."""
        option_set = (
            self.session.query(OptionSet)
            .filter(OptionSet.tenant_id == tenant_id, OptionSet.name == name.value)
            .first()
        )
        if option_set is None:
            self.logger.debug(
                "Settings target option set missing, skipping",
                extra={"tenant_id": tenant_id, "option_set": name.value},
            )
            return 0

        options = (
            self.session.query(OptionSetOption)
            .filter(
                OptionSetOption.option_set_id == option_set.id,
                OptionSetOption.option_key.in_(list(updates)),
            )
            .all()
        )
        for option in options:
            for column, value in updates[option.option_key].items():
                setattr(option, column, value)
        return len(options)

    @operation()
    def load_catalog_settings(self, tenant_id: str) -> CatalogSettings:
        """
        Catalog item types and unit types, active options only, in sort order.

        Unit types fall back to a fixed default list when the tenant has no
        catalog_item_unit set.

        Raises:
            NotFoundError: If the tenant has no catalog_item_type set
        """
        option_sets = self._option_sets()
        type_set = option_sets.get_option_set(tenant_id, BuiltinOptionSet.CATALOG_ITEM_TYPE.value)
        if type_set is None:
            raise not_found(
                "OptionSet", tenant_id=tenant_id, name=BuiltinOptionSet.CATALOG_ITEM_TYPE.value
            )
        unit_set = option_sets.get_option_set(tenant_id, BuiltinOptionSet.CATALOG_ITEM_UNIT.value)

        types = [
            CatalogType(
                id=option.id,
                name=option.label,
                key=option.option_key,
                is_standard=True,
                color=option.color or DEFAULT_COLOR,
            )
            for option in type_set.active_options()
        ]
        if unit_set is not None:
            unit_types = [
                UnitType(id=option.id, name=option.label, key=option.option_key, enabled=True)
                for option in unit_set.active_options()
            ]
        else:
            unit_types = [
                UnitType(id=str(index), name=label, key=key, enabled=True)
                for index, (key, label) in enumerate(DEFAULT_UNIT_TYPES, start=1)
            ]
        return CatalogSettings(types=types, unit_types=unit_types)

    @operation()
    def load_quote_settings(self, tenant_id: str) -> QuoteSettings:
        """
        Quote statuses, active options only, in sort order.

        Raises:
            NotFoundError: If the tenant has no quote_status set
        """
        status_set = self._option_sets().get_option_set(
            tenant_id, BuiltinOptionSet.QUOTE_STATUS.value
        )
        if status_set is None:
            raise not_found(
                "OptionSet", tenant_id=tenant_id, name=BuiltinOptionSet.QUOTE_STATUS.value
            )

        return QuoteSettings(
            statuses=[
                QuoteStatus(
                    id=option.id,
                    name=option.label,
                    key=option.option_key,
                    is_standard=True,
                    color=option.color or DEFAULT_COLOR,
                    order=option.sort_order,
                )
                for option in status_set.active_options()
            ]
        )

    @operation()
    def update_catalog_settings(
        self, tenant_id: str, settings: Union[CatalogSettings, Dict[str, Any]]
    ) -> int:
        """
        Relabel and recolor catalog types and relabel unit types, matched by key.

        Keys with no matching option are ignored, as are missing sets.

        Returns:
            Number of options updated
        """
        self._require_tenant_id(tenant_id)
        settings = self._coerce_schema(CatalogSettings, settings)
        try:
            updated = self._update_options(
                tenant_id,
                BuiltinOptionSet.CATALOG_ITEM_TYPE,
                {t.key: {"label": t.name, "color": t.color} for t in settings.types},
            )
            updated += self._update_options(
                tenant_id,
                BuiltinOptionSet.CATALOG_ITEM_UNIT,
                {u.key: {"label": u.name} for u in settings.unit_types},
            )
            self.session.flush()
            self.commit()
            self.logger.info(
                "Updated catalog settings", extra={"tenant_id": tenant_id, "updated": updated}
            )
            return updated
        except Exception as e:
            self._handle_service_exception("update_catalog_settings", e)

    @operation()
    def update_quote_settings(
        self, tenant_id: str, settings: Union[QuoteSettings, Dict[str, Any]]
    ) -> int:
        """
        Relabel, recolor and reorder quote statuses, matched by key.

        Returns:
            Number of options updated
        """
        self._require_tenant_id(tenant_id)
        settings = self._coerce_schema(QuoteSettings, settings)
        try:
            updated = self._update_options(
                tenant_id,
                BuiltinOptionSet.QUOTE_STATUS,
                {
                    s.key: {"label": s.name, "color": s.color, "sort_order": s.order}
                    for s in settings.statuses
                },
            )
            self.session.flush()
            self.commit()
            self.logger.info(
                "Updated quote settings", extra={"tenant_id": tenant_id, "updated": updated}
            )
            return updated
        except Exception as e:
            self._handle_service_exception("update_quote_settings", e)
