"""
Option set service with direct SQLAlchemy access.

Option sets are tenant-scoped controlled vocabularies. Sets are looked up by
(tenant_id, name); options are addressed by id but only ever within a set
owned by the caller's tenant. Options are archived by clearing `is_active`,
never deleted.
"""

from collections import defaultdict
from typing import AbstractSet, Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import exists

from ..constants import DEFAULT_OPTION_SETS
from ..context.operation_context import operation
from ..db.db_option_set_models import OptionSet, OptionSetOption
from ..exceptions import ErrorCode, ValidationError, duplicate, not_found
from ..schemas.field_definition_schema import coerce_entity_type
from ..schemas.option_set_schema import (
    OptionSetOptionCreate,
    OptionSetOptionRead,
    OptionSetOptionUpdate,
    OptionSetRead,
    OptionSetWithOptions,
)
from .base_service import SessionManagedService


class OptionSetService(SessionManagedService):
    """
    Service for managing option sets and their options.
    """

    def _with_options(
        self, option_set: OptionSet, options: Iterable[OptionSetOption]
    ) -> OptionSetWithOptions:
        return OptionSetWithOptions(
            **OptionSetRead.model_validate(option_set).model_dump(),
            options=[OptionSetOptionRead.model_validate(option) for option in options],
        )

    def _options_by_set(self, option_set_ids: List[str]) -> Dict[str, List[OptionSetOption]]:
        """Every option of the given sets, grouped by set and ordered by sort_order."""
        grouped: Dict[str, List[OptionSetOption]] = defaultdict(list)
        if not option_set_ids:
            return grouped
        options = (
            self.session.query(OptionSetOption)
            .filter(OptionSetOption.option_set_id.in_(option_set_ids))
            .order_by(OptionSetOption.sort_order, OptionSetOption.option_key)
            .all()
        )
        for option in options:
            grouped[option.option_set_id].append(option)
        return grouped

    def _find_by_name(self, tenant_id: str, name: str) -> Optional[OptionSet]:
        return (
            self.session.query(OptionSet)
            .filter(OptionSet.tenant_id == tenant_id, OptionSet.name == name)
            .first()
        )

    def _get_owned_option_set(self, option_set_id: str) -> OptionSet:
        """Load a set owned by the caller's tenant; other tenants' sets are not found."""
        tenant_id = self._current_tenant_id()
        option_set = (
            self.session.query(OptionSet)
            .filter(OptionSet.id == option_set_id, OptionSet.tenant_id == tenant_id)
            .first()
        )
        if option_set is None:
            raise not_found("OptionSet", option_set_id=option_set_id)
        return option_set

    def _get_option(self, option_set: OptionSet, option_id: str) -> OptionSetOption:
        option = (
            self.session.query(OptionSetOption)
            .filter(
                OptionSetOption.id == option_id,
                OptionSetOption.option_set_id == option_set.id,
            )
            .first()
        )
        if option is None:
            raise not_found("OptionSetOption", option_set_id=option_set.id, option_id=option_id)
        return option

    @operation()
    def get_option_set(self, tenant_id: str, name: str) -> Optional[OptionSetWithOptions]:
        """
        Get a tenant's option set by name with all of its options.

        Options are ordered by sort_order and include inactive ones.

        Returns:
            The option set, or None if the tenant has no set with that name
        """
        self._require_tenant_id(tenant_id)
        try:
            option_set = self._find_by_name(tenant_id, name)
            if option_set is None:
                return None
            options = self._options_by_set([option_set.id])[option_set.id]
            return self._with_options(option_set, options)
        except Exception as e:
            self._handle_service_exception("get_option_set", e)

    @operation()
    def get_active_option_keys(self, tenant_id: str, name: str) -> AbstractSet[str]:
        """
        Keys of the active options of a named set, in sort order.

        A missing set yields an empty set rather than an error.
        """
        option_set = self.get_option_set(tenant_id, name)
        if option_set is None:
            return frozenset()
        return option_set.active_option_keys()

    @operation()
    def get_option_sets_by_ids(
        self, tenant_id: str, option_set_ids: Iterable[str]
    ) -> Dict[str, OptionSetWithOptions]:
        """Resolve several sets at once; ids owned by other tenants are skipped."""
        self._require_tenant_id(tenant_id)
        ids = list(dict.fromkeys(option_set_ids))
        if not ids:
            return {}
        try:
            option_sets = (
                self.session.query(OptionSet)
                .filter(OptionSet.tenant_id == tenant_id, OptionSet.id.in_(ids))
                .all()
            )
            grouped = self._options_by_set([option_set.id for option_set in option_sets])
            return {
                option_set.id: self._with_options(option_set, grouped[option_set.id])
                for option_set in option_sets
            }
        except Exception as e:
            self._handle_service_exception("get_option_sets_by_ids", e)

    @operation()
    def list_option_sets(self, tenant_id: str) -> List[OptionSetWithOptions]:
        """Every option set of a tenant, by name, each with its ordered options."""
        self._require_tenant_id(tenant_id)
        try:
            option_sets = (
                self.session.query(OptionSet)
                .filter(OptionSet.tenant_id == tenant_id)
                .order_by(OptionSet.name)
                .all()
            )
            grouped = self._options_by_set([option_set.id for option_set in option_sets])
            return [
                self._with_options(option_set, grouped[option_set.id])
                for option_set in option_sets
            ]
        except Exception as e:
            self._handle_service_exception("list_option_sets", e)

    @operation()
    def create_option_set(
        self, tenant_id: str, name: str, entity_type: Optional[str] = None
    ) -> OptionSetRead:
        """
        Create an empty option set.

        Raises:
            ValidationError: If name is blank or entity_type is not a known entity type
            ConflictError: If the tenant already has a set with this name
        """
        self._require_tenant_id(tenant_id)
        if not name or not name.strip():
            raise ValidationError(
                "Option set name is required", field="name", error_code=ErrorCode.MISSING_REQUIRED
            )
        if entity_type is not None and coerce_entity_type(entity_type) is None:
            raise ValidationError(
                f"Invalid entity type: {entity_type}", field="entity_type", value=entity_type
            )

        try:
            if self.session.query(
                exists().where(OptionSet.tenant_id == tenant_id, OptionSet.name == name)
            ).scalar():
                raise duplicate("OptionSet", tenant_id=tenant_id, name=name)

            option_set = OptionSet(
                tenant_id=tenant_id,
                name=name,
                entity_type=coerce_entity_type(entity_type).value if entity_type else None,
            )
            with self._savepoint(
                lambda e: duplicate("OptionSet", cause=e, tenant_id=tenant_id, name=name)
            ):
                self.session.add(option_set)
            self.commit()

            self.logger.info(
                "Created option set",
                extra={"option_set_id": option_set.id, "tenant_id": tenant_id, "name": name},
            )
            return OptionSetRead.model_validate(option_set)
        except Exception as e:
            self._handle_service_exception("create_option_set", e)

    @operation()
    def add_option(
        self,
        option_set_id: str,
        option_data: Union[OptionSetOptionCreate, Dict[str, Any]],
    ) -> OptionSetOptionRead:
        """
        Append an option to a set owned by the caller's tenant.

        Raises:
            ValidationError: If option_key or label is missing
            NotFoundError: If the set does not belong to the caller's tenant
            ConflictError: If the set already has an option with this key
        """
        option_data = self._coerce_schema(OptionSetOptionCreate, option_data)
        try:
            option_set = self._get_owned_option_set(option_set_id)
            option_key = option_data.option_key

            if self.session.query(
                exists().where(
                    OptionSetOption.option_set_id == option_set.id,
                    OptionSetOption.option_key == option_key,
                )
            ).scalar():
                raise duplicate(
                    "OptionSetOption", option_set_id=option_set.id, option_key=option_key
                )

            option = OptionSetOption(option_set_id=option_set.id, **option_data.model_dump())
            with self._savepoint(
                lambda e: duplicate(
                    "OptionSetOption", cause=e, option_set_id=option_set_id, option_key=option_key
                )
            ):
                self.session.add(option)
            self.commit()
            return OptionSetOptionRead.model_validate(option)
        except Exception as e:
            self._handle_service_exception("add_option", e, option_set_id)

    @operation()
    def update_option(
        self,
        option_set_id: str,
        option_id: str,
        update_data: Union[OptionSetOptionUpdate, Dict[str, Any]],
    ) -> OptionSetOptionRead:
        """
        Apply a partial update to an option.

        Only fields explicitly set on `update_data` are written. Setting a field
        to null is only allowed for description and color.

        Raises:
            NotFoundError: If the option is not in the set or the set is not the caller's
        """
        update_data = self._coerce_schema(OptionSetOptionUpdate, update_data)
        changes = update_data.model_dump(exclude_unset=True)
        for key in ("label", "sort_order", "is_active"):
            if key in changes and changes[key] is None:
                raise ValidationError(f"{key} cannot be null", field=key)

        try:
            option = self._get_option(self._get_owned_option_set(option_set_id), option_id)
            for key, value in changes.items():
                setattr(option, key, value)
            self.session.flush()
            self.commit()
            return OptionSetOptionRead.model_validate(option)
        except Exception as e:
            self._handle_service_exception("update_option", e, option_id)

    @operation()
    def archive_option(self, option_set_id: str, option_id: str) -> OptionSetOptionRead:
        """
        Deactivate an option. Archiving an inactive option changes nothing.

        Raises:
            NotFoundError: If the option is not in the set or the set is not the caller's
        """
        try:
            option = self._get_option(self._get_owned_option_set(option_set_id), option_id)
            if option.is_active:
                option.is_active = False
                self.session.flush()
                self.commit()
            return OptionSetOptionRead.model_validate(option)
        except Exception as e:
            self._handle_service_exception("archive_option", e, option_id)

    @operation()
    def seed_default_option_sets(self, tenant_id: str) -> List[OptionSetRead]:
        """
        Create the built-in option sets a new tenant starts with.

        Sets the tenant already has are left alone, so this is safe to re-run.

        Returns:
            The sets created by this call
        """
        self._require_tenant_id(tenant_id)
        created: List[OptionSetRead] = []
        try:
            for name, default in DEFAULT_OPTION_SETS.items():
                if self._find_by_name(tenant_id, name.value) is not None:
                    continue

                option_set = OptionSet(
                    tenant_id=tenant_id, name=name.value, entity_type=default["entity_type"]
                )
                with self._savepoint(
                    lambda e: duplicate("OptionSet", cause=e, tenant_id=tenant_id, name=name.value)
                ):
                    self.session.add(option_set)
                for sort_order, (option_key, label, color) in enumerate(default["options"]):
                    self.session.add(
                        OptionSetOption(
                            option_set_id=option_set.id,
                            option_key=option_key,
                            label=label,
                            color=color,
                            sort_order=sort_order,
                            is_active=True,
                        )
                    )
                created.append(OptionSetRead.model_validate(option_set))

            self.session.flush()
            self.commit()
            self.logger.info(
                "Seeded default option sets",
                extra={"tenant_id": tenant_id, "created": [s.name for s in created]},
            )
            return created
        except Exception as e:
            self._handle_service_exception("seed_default_option_sets", e)
