"""
Unit tests for the Cluster validator.

The validator aggregates every rule family into one deterministic list
of field errors. Baseline rules only run for updates.
"""

from postgres_operator.models.field_errors import ErrorType
from postgres_operator.services.cluster_validator import (
    RULE_FAMILIES,
    ClusterValidator,
    validate_cluster,
)
from tests.fixtures.clusters import make_cluster

DEFAULT_IMAGE = "quay.io/enterprisedb/postgresql:13.1"


class TestClusterValidatorCreate:
    """Test cases for validating new Clusters."""

    def setup_method(self):
        self.validator = ClusterValidator(default_image=DEFAULT_IMAGE)

    def test_valid_cluster(self):
        assert self.validator.validate(make_cluster()) == []

    def test_two_recovery_target_selectors(self):
        cluster = make_cluster(
            bootstrap={
                "recovery": {
                    "recoveryTarget": {"targetXID": "3", "targetTime": "2020-01-01 01:01"}
                }
            }
        )

        errors = self.validator.validate(cluster)

        assert len(errors) == 1

    def test_name_with_dot(self):
        assert len(self.validator.validate(make_cluster(name="test.one"))) == 1

    def test_name_of_36_characters(self):
        assert self.validator.validate(make_cluster(name="a" * 36)) == []

    def test_name_of_72_characters(self):
        errors = self.validator.validate(make_cluster(name="a" * 72))

        assert len(errors) == 1
        assert errors[0].type == ErrorType.TOO_LONG

    def test_errors_from_every_family_are_aggregated(self):
        cluster = make_cluster(
            name="Bad.Name",
            bootstrap={"initdb": {"database": "app"}, "recovery": {}},
            storage={"size": "garbage"},
            imageName="postgres:latest",
            instances=1,
            maxSyncReplicas=1,
            primaryUpdateStrategy="supervised",
        )

        errors = self.validator.validate(cluster)

        assert [str(error.field) for error in errors] == [
            "metadata.name",
            "spec.bootstrap",
            "spec.bootstrap.initdb.owner",
            "spec.storage.size",
            "spec.imageName",
            "spec.maxSyncReplicas",
            "spec.primaryUpdateStrategy",
        ]

    def test_baseline_rules_skipped_on_create(self):
        cluster = make_cluster(postgresql={"parameters": {"data_directory": "/x"}})
        assert self.validator.validate(cluster) == []

    def test_validation_is_deterministic(self):
        cluster = make_cluster(name="x" * 80, storage={}, instances=0)
        assert self.validator.validate(cluster) == self.validator.validate(cluster)


class TestClusterValidatorUpdate:
    """Test cases for validating updates against the persisted Cluster."""

    def setup_method(self):
        self.validator = ClusterValidator(default_image=DEFAULT_IMAGE)

    def test_major_upgrade_with_parameter_change(self):
        old = make_cluster(imageName="postgres:10.4")
        new = make_cluster(
            imageName="postgres:11.0", postgresql={"parameters": {"shared_buffers": "4G"}}
        )

        errors = self.validator.validate(new, old)

        assert len(errors) == 1
        assert str(errors[0].field) == "spec.imageName"

    def test_parameter_change_same_image(self):
        old = make_cluster(imageName="postgres:10.4")
        new = make_cluster(
            imageName="postgres:10.4", postgresql={"parameters": {"shared_buffers": "4G"}}
        )

        assert self.validator.validate(new, old) == []

    def test_storage_shrink(self):
        old = make_cluster(storage={"size": "1G"})
        new = make_cluster(storage={"size": "512M"})

        assert len(self.validator.validate(new, old)) == 1

    def test_storage_growth(self):
        old = make_cluster(storage={"size": "8G"})
        new = make_cluster(storage={"size": "10G"})

        assert self.validator.validate(new, old) == []

    def test_major_downgrade(self):
        old = make_cluster(imageName="postgres:13.1")
        new = make_cluster(imageName="postgres:12.5")

        errors = self.validator.validate(new, old)

        assert len(errors) == 1
        assert "downgrades are not supported" in errors[0].detail

    def test_fixed_parameter_with_major_upgrade_reports_both(self):
        old = make_cluster(
            imageName="postgres:12.4", postgresql={"parameters": {"port": "5432"}}
        )
        new = make_cluster(
            imageName="postgres:13.1", postgresql={"parameters": {"port": "5433"}}
        )

        errors = self.validator.validate(new, old)

        assert [error.type for error in errors] == [ErrorType.FORBIDDEN, ErrorType.INVALID]

    def test_injected_fixed_parameters(self):
        validator = ClusterValidator(
            fixed_parameters={"shared_buffers"}, default_image=DEFAULT_IMAGE
        )
        old = make_cluster()
        new = make_cluster(postgresql={"parameters": {"shared_buffers": "4G"}})

        errors = validator.validate(new, old)

        assert len(errors) == 1
        assert errors[0].type == ErrorType.FORBIDDEN


class TestValidateByFamily:
    """Test cases for family grouped results."""

    def test_every_family_is_present(self):
        validator = ClusterValidator(default_image=DEFAULT_IMAGE)

        results = validator.validate_by_family(make_cluster())

        assert list(results) == list(RULE_FAMILIES)
        assert all(errors == [] for errors in results.values())

    def test_errors_are_grouped(self):
        validator = ClusterValidator(default_image=DEFAULT_IMAGE)

        results = validator.validate_by_family(
            make_cluster(storage={"size": "1G"}), make_cluster(storage={"size": "2G"})
        )

        assert len(results["storage"]) == 1
        assert results["naming"] == []


class TestValidateClusterFunction:
    """Test cases for the module level entry point."""

    def test_create(self):
        assert validate_cluster(None, make_cluster()) == []

    def test_update(self):
        old = make_cluster(storage={"size": "1G"})
        new = make_cluster(storage={"size": "512M"})

        assert len(validate_cluster(old, new)) == 1
