"""Tests for encoding executables to the queue wire format."""

from __future__ import annotations

import base64
import json
import pickle

import pytest

from jobpipeline.core.exceptions import JobNotRegisteredError, SerializationError
from jobpipeline.di.container import Container
from jobpipeline.models.pipeline import ExecutablePayload, JobKind, RoutingMetadata
from jobpipeline.pipeline.codec import decode, encode
from jobpipeline.pipeline.jobs import JobRegistry
from tests.fakes import FirstJob, FooJob, SampleModel, SecondJob, ValueStore, record_inline


@pytest.fixture
def registry():
    return JobRegistry()


def test_round_trip_runs_with_identical_side_effects(runtime, tmp_path):
    direct_store = ValueStore(tmp_path / "direct.json").flush()
    replay_store = ValueStore(tmp_path / "replay.json").flush()
    pipeline = runtime.pipeline([FirstJob, SecondJob]).send(lambda store: [SampleModel(), store])

    pipeline.to_executable([direct_store]).run(runtime.container)
    body = encode(pipeline.to_executable([replay_store]), runtime.registry)
    decode(body, runtime.registry).run(runtime.container)

    assert direct_store.get("foo") == replay_store.get("foo") == "first job changed property"


def test_payload_preserves_job_order_and_routing(runtime):
    runtime.registry.register(record_inline)
    executable = (
        runtime.pipeline([SecondJob, record_inline, FooJob, FirstJob])
        .should_be_queued("reports")
        .on_connection("redis")
        .delay(15)
        .tries(4)
        .send(lambda event: [1, "two", 3.0])
        .to_executable([None])
    )

    restored = decode(encode(executable, runtime.registry), runtime.registry)

    assert restored.id == executable.id
    assert restored.jobs == executable.jobs
    assert restored.passable == (1, "two", 3.0)
    assert restored.routing == RoutingMetadata(queue="reports", connection="redis", delay=15.0, max_tries=4)
    assert restored.should_be_queued is True
    assert not restored.has_run


def test_payload_is_json_with_named_references(runtime):
    executable = runtime.pipeline([FooJob]).to_executable(["event"])

    data = json.loads(encode(executable, runtime.registry))

    assert data["jobs"] == [{"kind": "named", "name": f"{FooJob.__module__}.FooJob"}]
    assert data["id"] == executable.id
    ExecutablePayload.model_validate(data)


def test_registered_inline_job_round_trips(runtime, store):
    name = runtime.registry.register(record_inline, "record-inline")
    executable = runtime.pipeline([record_inline]).send(lambda event: store).to_executable([None])

    body = encode(executable, runtime.registry)
    assert json.loads(body)["jobs"] == [{"kind": JobKind.INLINE.value, "name": name}]

    decode(body, runtime.registry).run(runtime.container)
    assert store.get("inline") is True


def test_unregistered_inline_job_cannot_be_encoded(runtime):
    executable = runtime.pipeline([lambda: None]).to_executable([None])

    with pytest.raises(SerializationError, match="must be registered"):
        encode(executable, runtime.registry)


def test_unpicklable_passable_raises(runtime):
    executable = runtime.pipeline([FooJob]).send(lambda event: lambda: None).to_executable([None])

    with pytest.raises(SerializationError):
        encode(executable, runtime.registry)


def test_decode_rejects_malformed_body(registry):
    with pytest.raises(SerializationError):
        decode("{not json", registry)


def test_decode_rejects_unknown_job(runtime, registry):
    body = encode(runtime.pipeline([FooJob]).to_executable([None]), runtime.registry)

    with pytest.raises(JobNotRegisteredError):
        decode(body, registry)


def test_decoded_executable_is_independent_of_the_original(runtime, store):
    executable = runtime.pipeline([FooJob]).send(lambda event: store).to_executable([None])
    restored = decode(encode(executable, runtime.registry), runtime.registry)

    restored.run(Container())

    assert store.get("foo") == "bar"
    assert not executable.has_run


class TestSigning:
    KEY = b"worker-secret"

    def test_signed_payload_round_trips(self, runtime, store):
        executable = runtime.pipeline([FooJob]).send(lambda event: store).to_executable([None])

        body = encode(executable, runtime.registry, self.KEY)
        assert json.loads(body)["signature"]

        decode(body, runtime.registry, self.KEY).run(runtime.container)
        assert store.get("foo") == "bar"

    def test_unsigned_payload_is_rejected_when_a_key_is_set(self, runtime):
        body = encode(runtime.pipeline([FooJob]).to_executable([None]), runtime.registry)

        with pytest.raises(SerializationError, match="not signed"):
            decode(body, runtime.registry, self.KEY)

    def test_wrong_key_is_rejected(self, runtime):
        body = encode(runtime.pipeline([FooJob]).to_executable([None]), runtime.registry, b"other")

        with pytest.raises(SerializationError, match="invalid signature"):
            decode(body, runtime.registry, self.KEY)

    def test_tampered_passable_is_rejected_before_unpickling(self, runtime, monkeypatch):
        body = encode(runtime.pipeline([FooJob]).to_executable(["safe"]), runtime.registry, self.KEY)
        data = json.loads(body)
        data["passable"] = base64.b64encode(pickle.dumps(("swapped",))).decode("ascii")

        def fail_loads(*args, **kwargs):
            raise AssertionError("pickle.loads called on an unverified payload")

        monkeypatch.setattr("jobpipeline.pipeline.codec.pickle.loads", fail_loads)
        with pytest.raises(SerializationError, match="invalid signature"):
            decode(json.dumps(data), runtime.registry, self.KEY)

    def test_tampered_job_list_is_rejected(self, runtime):
        runtime.registry.register(SecondJob)
        body = encode(runtime.pipeline([FooJob]).to_executable([None]), runtime.registry, self.KEY)
        data = json.loads(body)
        data["jobs"][0]["name"] = f"{SecondJob.__module__}.SecondJob"

        with pytest.raises(SerializationError, match="invalid signature"):
            decode(json.dumps(data), runtime.registry, self.KEY)
