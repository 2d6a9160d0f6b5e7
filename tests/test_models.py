"""
Tests for app/models: units, outcomes and batch jobs.
"""

import pytest
from pydantic import TypeAdapter

from app.models.batch import BatchJob, BatchMode, BatchState
from app.models.metadata import (
    ALT_TEXT_MAX_LENGTH,
    META_DESCRIPTION_MAX_LENGTH,
    META_TITLE_MAX_LENGTH,
    ImageUnit,
    MetadataUnit,
    clamp,
)
from app.models.outcome import Outcome, RemoteFailure, Success, ValidationFailure


class TestUnits:
    """Keys, overrides and clamping on Unit models."""

    def test_image_unit_key_combines_product_and_image(self, image_unit):
        assert image_unit.key == "gid://shopify/Product/1001_gid://shopify/MediaImage/2001"

    def test_metadata_unit_key_is_product_id(self, metadata_unit):
        assert metadata_unit.key == "gid://shopify/Product/1001"

    def test_edited_value_overrides_current(self, image_unit):
        edited = image_unit.with_overrides(alt_text="new alt")
        assert edited.alt_text == "new alt"
        assert image_unit.alt_text == "drill"
        assert edited.product_id == image_unit.product_id

    def test_absent_edit_uses_fetched_value(self, metadata_unit):
        assert metadata_unit.meta_title == "Cordless Drill"
        assert metadata_unit.meta_description == "A drill."

    def test_empty_edit_still_overrides(self, metadata_unit):
        edited = metadata_unit.with_overrides(meta_title="")
        assert edited.meta_title == ""
        assert edited.meta_description == "A drill."

    def test_alt_text_clamped_to_125(self, image_unit):
        edited = image_unit.with_overrides(alt_text="a" * 200)
        assert len(edited.edited_alt_text) == ALT_TEXT_MAX_LENGTH
        assert len(edited.alt_text) == 125

    def test_meta_fields_clamped(self, metadata_unit):
        edited = metadata_unit.with_overrides(meta_title="t" * 200, meta_description="d" * 200)
        assert len(edited.meta_title) == META_TITLE_MAX_LENGTH == 60
        assert len(edited.meta_description) == META_DESCRIPTION_MAX_LENGTH == 160

    def test_units_are_immutable(self, image_unit):
        with pytest.raises(Exception):
            image_unit.product_id = "other"

    def test_camel_case_aliases(self):
        unit = ImageUnit.model_validate({
            "productId": "gid://shopify/Product/1",
            "imageId": "gid://shopify/MediaImage/1",
            "title": "Hat",
            "currentAltText": "a hat",
        })
        dumped = unit.model_dump(by_alias=True)
        assert dumped["productId"] == "gid://shopify/Product/1"
        assert dumped["currentAltText"] == "a hat"
        assert dumped["productType"] == "N/A"

    def test_clamp_handles_none(self):
        assert clamp(None, 10) == ""


class TestOutcome:
    """Outcome tagged union."""

    def test_discriminator_round_trip(self):
        adapter = TypeAdapter(Outcome)
        assert isinstance(adapter.validate_python({"kind": "success", "value": 1}), Success)
        assert isinstance(adapter.validate_python({"kind": "validation_failure", "reason": "x"}), ValidationFailure)
        assert isinstance(adapter.validate_python({"kind": "remote_failure", "message": "x"}), RemoteFailure)

    def test_failure_messages(self):
        assert ValidationFailure(reason="bad id").message == "bad id"
        assert RemoteFailure(message="down").message == "down"
        assert Success(value=None).ok
        assert not RemoteFailure(message="down").ok


class TestBatchJob:
    """Aggregates derived from a BatchJob."""

    def _job(self, units, outcomes):
        job = BatchJob(items=units, mode=BatchMode.UPDATE)
        for unit, outcome in zip(units, outcomes):
            job.results[unit.key] = outcome
        job.state = BatchState.COMPLETED
        return job

    def test_counts_and_errors(self, image_units):
        job = self._job(image_units, [
            Success(value={"id": 1}),
            RemoteFailure(message="Media not found"),
            Success(value={"id": 3}),
        ])
        assert job.success_count == 2
        assert job.errors == [
            "Image gid://shopify/Product/2_gid://shopify/MediaImage/200: Media not found"
        ]
        assert [s.value for s in job.successes] == [{"id": 1}, {"id": 3}]

    def test_display_errors_capped_at_five(self):
        units = [MetadataUnit(product_id=f"gid://shopify/Product/{n}", title="x") for n in range(8)]
        job = self._job(units, [RemoteFailure(message="nope")] * 8)

        shown = job.display_errors()
        assert len(shown) == 6
        assert shown[:5] == job.errors[:5]
        assert shown[5] == "...and 3 more errors"

    def test_display_errors_not_padded(self, image_units):
        job = self._job(image_units, [ValidationFailure(reason="bad")] + [Success()] * 2)
        assert job.display_errors() == job.errors
