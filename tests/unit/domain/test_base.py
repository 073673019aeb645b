"""Unit tests for base domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from bluegreen.domain.models.base import (
    AggregateRoot,
    DomainEvent,
    generate_id,
    utc_now,
    ValueObject,
)


class TestGenerateId:
    def test_returns_string(self) -> None:
        assert isinstance(generate_id(), str)

    def test_unique(self) -> None:
        ids = {generate_id() for _ in range(100)}
        assert len(ids) == 100


class TestUtcNow:
    def test_timezone_aware(self) -> None:
        assert utc_now().tzinfo is not None


class TestValueObject:
    def test_frozen(self) -> None:
        class Listener(ValueObject):
            arn: str

        listener = Listener(arn="arn:listener/prod")
        with pytest.raises(ValidationError):
            listener.arn = "arn:listener/test"  # type: ignore[misc]


class TestAggregateRoot:
    def test_add_and_collect_events(self) -> None:
        agg = AggregateRoot()
        agg.add_event(DomainEvent(event_type="test"))
        assert len(agg.pending_events) == 1
        assert len(agg.collect_events()) == 1
        assert agg.pending_events == []

    def test_events_not_shared_between_instances(self) -> None:
        first = AggregateRoot()
        second = AggregateRoot()
        first.add_event(DomainEvent(event_type="a"))
        assert second.pending_events == []

    def test_touch_moves_updated_at(self) -> None:
        agg = AggregateRoot()
        before = agg.updated_at
        agg.touch()
        assert agg.updated_at >= before
