from __future__ import annotations

import json
import logging

import pytest

from messaging.mock_sqs import MockSQSQueue
from models.errors import BatchError, DeliveryError, ObjectNotFoundError, ValidationError
from models.records import FileEvent
from services.ingestion import IngestionService
from settings import ErrorPolicy
from storage.mock_s3 import MockS3Bucket


@pytest.fixture()
def bucket(recording_bucket) -> MockS3Bucket:
    return recording_bucket


def _events(*keys: str) -> list[FileEvent]:
    return [FileEvent(key=key) for key in keys]


def test_empty_batch_produces_empty_result(bucket: MockS3Bucket, make_queue) -> None:
    service = IngestionService(store=bucket, queue=make_queue())

    result = service.process([])

    assert result.message_ids == []
    assert result.failures == []
    assert result.error is None


def test_single_row_is_queued(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("data.csv", b"lon,lat\n1,2")
    queue = make_queue()
    service = IngestionService(store=bucket, queue=queue)

    result = service.process(_events("data.csv"))

    assert result.message_ids == ["msg-1"]
    assert result.error is None
    assert [json.loads(payload) for payload in queue.payloads] == [{"lat": "2", "lon": "1"}]


def test_multiple_files_yield_ids_in_file_then_row_order(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("first.csv", b"lon,lat\n1,2\n2,4\n5,6\n")
    bucket.put_object("second.csv", b"lon,lat\n7,8\n9,10\n11,12\n")
    queue = make_queue()
    service = IngestionService(store=bucket, queue=queue)

    result = service.process(_events("first.csv", "second.csv"))

    assert result.message_ids == [f"msg-{n}" for n in range(1, 7)]
    lons = [json.loads(payload)["lon"] for payload in queue.payloads]
    assert lons == ["1", "2", "5", "7", "9", "11"]


@pytest.mark.parametrize("content", [b"lon,lat", b"lon,lat\n", b""])
def test_header_only_or_empty_file_is_zero_work(bucket: MockS3Bucket, make_queue, content: bytes) -> None:
    bucket.put_object("data.csv", content)
    queue = make_queue()
    service = IngestionService(store=bucket, queue=queue)

    result = service.process(_events("data.csv"))

    assert result.message_ids == []
    assert result.error is None
    assert queue.calls == 0


def test_non_csv_keys_are_skipped(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("data.txt", b"lon,lat\n1,2\n3,4")
    service = IngestionService(store=bucket, queue=make_queue())

    result = service.process(_events("data.txt"))

    assert result.message_ids == []
    assert result.error is None
    assert bucket.fetched_keys == []


def test_extra_columns_are_ignored(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("data.csv", b"lon,lat,city\n18.42,-33.92,Cape Town\n")
    queue = make_queue()
    service = IngestionService(store=bucket, queue=queue)

    result = service.process(_events("data.csv"))

    assert result.message_ids == ["msg-1"]
    assert json.loads(queue.payloads[0]) == {"lat": "-33.92", "lon": "18.42"}


def test_continue_policy_skips_bad_rows(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("data.csv", b"lon,lat\n1,2\n,3\n4,5\n")
    queue = make_queue()
    service = IngestionService(store=bucket, queue=queue, policy=ErrorPolicy.CONTINUE)

    result = service.process(_events("data.csv"))

    assert result.message_ids == ["msg-1", "msg-2"]
    assert len(queue.payloads) == 2
    assert len(result.failures) == 1
    failure = result.failures[0]
    assert failure.key == "data.csv"
    assert failure.row_number == 3
    assert isinstance(failure.error, ValidationError)
    assert str(result.error) == "bad data provided"


def test_abort_policy_stops_at_bad_row(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("data.csv", b"lon,lat\n1,2\n,3\n4,5\n")
    bucket.put_object("later.csv", b"lon,lat\n6,7\n")
    queue = make_queue()
    service = IngestionService(store=bucket, queue=queue, policy=ErrorPolicy.ABORT)

    result = service.process(_events("data.csv", "later.csv"))

    assert result.message_ids == ["msg-1"]
    assert result.aborted is True
    assert isinstance(result.error, ValidationError)
    assert bucket.fetched_keys == ["data.csv"]


def test_continue_policy_skips_file_that_cannot_be_fetched(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("a.csv", b"lon,lat\n1,2\n3,4\n")
    bucket.put_object("b.csv", b"lon,lat\n5,6\n7,8\n")
    service = IngestionService(store=bucket, queue=make_queue(), policy=ErrorPolicy.CONTINUE)

    result = service.process(_events("a.csv", "missing.csv", "b.csv"))

    assert len(result.message_ids) == 4
    assert [failure.key for failure in result.failures] == ["missing.csv"]
    assert result.failures[0].row_number is None
    assert isinstance(result.error, ObjectNotFoundError)
    assert bucket.fetched_keys == ["a.csv", "missing.csv", "b.csv"]


def test_abort_policy_stops_at_file_that_cannot_be_fetched(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("a.csv", b"lon,lat\n1,2\n3,4\n")
    bucket.put_object("b.csv", b"lon,lat\n5,6\n7,8\n")
    service = IngestionService(store=bucket, queue=make_queue(), policy=ErrorPolicy.ABORT)

    result = service.process(_events("a.csv", "missing.csv", "b.csv"))

    assert len(result.message_ids) == 2
    assert isinstance(result.error, ObjectNotFoundError)
    assert bucket.fetched_keys == ["a.csv", "missing.csv"]
    with pytest.raises(ObjectNotFoundError):
        result.raise_for_failures()


def test_delivery_failures_are_recorded(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("data.csv", b"lon,lat\n1,2\n3,4\n5,6\n")
    queue = make_queue(fail_on_calls=(2,))
    service = IngestionService(store=bucket, queue=queue)

    result = service.process(_events("data.csv"))

    assert result.message_ids == ["msg-1", "msg-2"]
    assert isinstance(result.error, DeliveryError)
    assert result.failures[0].row_number == 3


def test_several_failures_are_reported_together(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("data.csv", b"lon,lat\n,1\n2,\n3,4\n")
    service = IngestionService(store=bucket, queue=make_queue())

    result = service.process(_events("data.csv", "missing.csv"))

    assert result.message_ids == ["msg-1"]
    error = result.error
    assert isinstance(error, BatchError)
    assert len(error.failures) == 3
    assert "3 item(s) failed" in str(error)
    assert "data.csv row 2" in str(error)


def test_undecodable_file_is_a_validation_failure(bucket: MockS3Bucket, make_queue) -> None:
    bucket.put_object("data.csv", b"lon,lat\n\xff\xfe,1\n")
    service = IngestionService(store=bucket, queue=make_queue())

    result = service.process(_events("data.csv"))

    assert result.message_ids == []
    assert isinstance(result.error, ValidationError)


def test_rows_land_on_mock_queue(tmp_path) -> None:
    bucket = MockS3Bucket("weather-data", root_path=tmp_path / "s3")
    queue = MockSQSQueue("weather-requests")
    bucket.put_object("uploads/coords.csv", b"lon,lat\n1,2\n3,4\n")
    service = IngestionService(store=bucket, queue=queue)

    result = service.process(_events("uploads/coords.csv"))

    pending = queue.pending()
    assert result.message_ids == [message_id for message_id, _ in pending]
    assert [json.loads(body) for _, body in pending] == [
        {"lat": "2", "lon": "1"},
        {"lat": "4", "lon": "3"},
    ]


def test_skipped_rows_are_logged(bucket: MockS3Bucket, make_queue, caplog) -> None:
    bucket.put_object("invalid.csv", b"lon,lat\n1,2\n,3\n")
    service = IngestionService(store=bucket, queue=make_queue())

    with caplog.at_level(logging.WARNING):
        service.process(_events("invalid.csv"))

    records = [record for record in caplog.records if record.name == "services.ingestion"]
    assert records, "Expected row skip warnings to be logged."
    messages = [record.getMessage() for record in records]
    assert any("Skipping row" in message and "bad data provided" in message for message in messages)
    assert any(getattr(record, "object_key", None) == "invalid.csv" for record in records)
    assert any(getattr(record, "row_number", None) == 3 for record in records)
