"""
Tests for EntityValidationService, the gate in front of every entity write.
"""

import pytest

from custom_fields_core.config import AppConfig, FeatureFlags, set_config
from custom_fields_core.exceptions import ErrorCode, ValidationError
from custom_fields_core.schemas import EntityValidationInput
from tests.fixtures.factories import (
    FieldDefinitionFactory,
    OptionSetFactory,
    OptionSetOptionFactory,
)


@pytest.fixture
def seeded(option_set_service, tenant_id):
    option_set_service.seed_default_option_sets(tenant_id)
    return tenant_id


@pytest.fixture
def company_fields(tenant_id):
    regions = OptionSetFactory(tenant_id=tenant_id, name="regions")
    OptionSetOptionFactory(option_set_id=regions.id, option_key="na", sort_order=0)
    OptionSetOptionFactory(option_set_id=regions.id, option_key="eu", sort_order=1, is_active=False)
    FieldDefinitionFactory(
        tenant_id=tenant_id,
        field_key="employee_count",
        label="Employee Count",
        data_type="number",
        required=True,
    )
    FieldDefinitionFactory(
        tenant_id=tenant_id,
        field_key="region",
        label="Region",
        data_type="enum",
        option_set_id=regions.id,
    )


class TestValidateEntity:
    """Merging custom-field and built-in attribute checks."""

    def test_missing_catalog_type_set_means_no_valid_values(
        self, entity_validation_service, tenant_id
    ):
        result = entity_validation_service.validate_entity(
            {"tenant_id": tenant_id, "entity_type": "catalog_item", "catalog_type": "widget"}
        )

        assert result.valid is False
        assert [(e.path, e.message) for e in result.errors] == [
            ("type", "Invalid catalog type. Must be one of: ")
        ]
        assert result.validated_custom_fields is None

    def test_valid_catalog_type(self, entity_validation_service, seeded):
        result = entity_validation_service.validate_entity(
            EntityValidationInput(
                tenant_id=seeded, entity_type="catalog_item", catalog_type="product"
            )
        )

        assert result.valid is True
        assert result.validated_custom_fields == {}

    def test_invalid_catalog_type_lists_active_keys(self, entity_validation_service, seeded):
        result = entity_validation_service.validate_entity(
            {"tenant_id": seeded, "entity_type": "catalog_item", "catalog_type": "service"}
        )

        assert result.errors[0].message == (
            "Invalid catalog type. Must be one of: resource_role, product, add_on"
        )

    def test_invalid_quote_status(self, entity_validation_service, seeded):
        result = entity_validation_service.validate_entity(
            {"tenant_id": seeded, "entity_type": "quote", "quote_status": "sent"}
        )

        assert [(e.path, e.message) for e in result.errors] == [
            (
                "status",
                "Invalid quote status. Must be one of: draft, pending_approval, approved, rejected",
            )
        ]

    def test_quote_status_ignored_for_other_entities(self, entity_validation_service, tenant_id):
        result = entity_validation_service.validate_entity(
            {"tenant_id": tenant_id, "entity_type": "contact", "quote_status": "nonsense"}
        )

        assert result.valid is True

    def test_catalog_type_not_supplied_is_not_checked(self, entity_validation_service, tenant_id):
        result = entity_validation_service.validate_entity(
            {"tenant_id": tenant_id, "entity_type": "catalog_item"}
        )

        assert result.valid is True

    @pytest.mark.parametrize(
        "entity_type,attribute,path",
        [("catalog_item", "catalog_type", "type"), ("quote", "quote_status", "status")],
    )
    def test_explicit_null_builtin_value_is_rejected(
        self, entity_validation_service, seeded, entity_type, attribute, path
    ):
        result = entity_validation_service.validate_entity(
            {"tenant_id": seeded, "entity_type": entity_type, attribute: None}
        )

        assert result.valid is False
        assert [e.path for e in result.errors] == [path]

    def test_valid_custom_fields_are_returned(
        self, entity_validation_service, tenant_id, company_fields
    ):
        result = entity_validation_service.validate_entity(
            {
                "tenant_id": tenant_id,
                "entity_type": "company",
                "custom_fields": {"employee_count": 250, "region": "na"},
            }
        )

        assert result.valid is True
        assert result.validated_custom_fields == {"employee_count": 250, "region": "na"}

    def test_errors_from_every_step_are_merged(
        self, entity_validation_service, seeded, company_fields
    ):
        FieldDefinitionFactory(tenant_id=seeded, entity_type="quote", field_key="po", label="PO")

        result = entity_validation_service.validate_entity(
            {
                "tenant_id": seeded,
                "entity_type": "quote",
                "custom_fields": {"po": 12, "bogus": "x"},
                "quote_status": "sent",
            }
        )

        assert [e.path for e in result.errors] == [
            "customFields.bogus",
            "customFields.po",
            "status",
        ]

    def test_company_scenarios(self, entity_validation_service, tenant_id, company_fields):
        result = entity_validation_service.validate_entity(
            {
                "tenant_id": tenant_id,
                "entity_type": "company",
                "custom_fields": {"employee_count": "50", "region": "eu"},
            }
        )

        assert [(e.path, e.message) for e in result.errors] == [
            ("customFields.employee_count", "Expected number"),
            ("customFields.region", "Invalid option. Must be one of: na"),
        ]

    def test_other_tenants_definitions_do_not_apply(
        self, entity_validation_service, other_tenant_id, company_fields
    ):
        result = entity_validation_service.validate_entity(
            {
                "tenant_id": other_tenant_id,
                "entity_type": "company",
                "custom_fields": {"employee_count": 5},
            }
        )

        assert [(e.path, e.message) for e in result.errors] == [
            ("customFields.employee_count", "Unknown custom field")
        ]

    def test_invalid_entity_type(self, entity_validation_service, tenant_id):
        result = entity_validation_service.validate_entity(
            {"tenant_id": tenant_id, "entity_type": "invoice", "custom_fields": {"a": 1}}
        )

        assert result.valid is False
        assert [(e.path, e.message) for e in result.errors] == [
            ("entityType", "Invalid entity type")
        ]

    def test_malformed_input_raises(self, entity_validation_service):
        with pytest.raises(ValidationError):
            entity_validation_service.validate_entity({"tenant_id": "", "entity_type": "company"})

    def test_rejection_logging_can_be_disabled(self, entity_validation_service, tenant_id):
        set_config(AppConfig(features=FeatureFlags(log_validation_failures=False)))

        result = entity_validation_service.validate_entity(
            {"tenant_id": tenant_id, "entity_type": "catalog_item", "catalog_type": "widget"}
        )

        assert result.valid is False


class TestEnsureValid:
    """Raising variant used by mutation flows."""

    def test_returns_validated_fields(self, entity_validation_service, tenant_id, company_fields):
        validated = entity_validation_service.ensure_valid(
            {
                "tenant_id": tenant_id,
                "entity_type": "company",
                "custom_fields": {"employee_count": 3},
            }
        )

        assert validated == {"employee_count": 3}

    def test_raises_with_error_list(self, entity_validation_service, tenant_id, company_fields):
        with pytest.raises(ValidationError) as exc_info:
            entity_validation_service.ensure_valid(
                {"tenant_id": tenant_id, "entity_type": "company", "custom_fields": {}}
            )

        error = exc_info.value
        assert error.status_code == 400
        assert error.error_code == ErrorCode.CONSTRAINT_VIOLATION
        assert error.context["errors"] == [
            {"path": "customFields.employee_count", "message": "Employee Count is required"}
        ]
