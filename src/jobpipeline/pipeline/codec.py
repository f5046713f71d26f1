"""Encode executables to their queue wire format and back.

The envelope is JSON (``ExecutablePayload``). Jobs travel as registry names;
the passable travels as a base64 pickle so arbitrary Python values survive
the round trip.

Unpickling runs code chosen by whoever wrote the message, so a worker must
only read queues that trusted producers can write to. With a signing key
configured, every payload carries an HMAC-SHA256 signature and ``decode``
refuses unsigned or tampered payloads before anything is unpickled.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import pickle

from pydantic import ValidationError

from jobpipeline.core.exceptions import SerializationError
from jobpipeline.models.pipeline import ExecutablePayload
from jobpipeline.pipeline.executable import Executable
from jobpipeline.pipeline.jobs import JobRegistry


def _signature(payload: ExecutablePayload, key: bytes) -> str:
    parts = [payload.id, payload.passable]
    parts.extend(f"{reference.kind}:{reference.name}" for reference in payload.jobs)
    digest = hmac.new(key, "\n".join(parts).encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def encode(executable: Executable, registry: JobRegistry, signing_key: bytes | None = None) -> str:
    """Serialize an executable to a JSON string, signed when a key is given."""
    jobs = [registry.reference(descriptor) for descriptor in executable.jobs]
    try:
        passable = base64.b64encode(pickle.dumps(executable.passable)).decode("ascii")
    except (pickle.PicklingError, TypeError, AttributeError) as exc:
        raise SerializationError(f"Passable of executable {executable.id} is not serializable: {exc}") from exc

    payload = ExecutablePayload(
        id=executable.id,
        jobs=jobs,
        passable=passable,
        routing=executable.routing,
        should_be_queued=executable.should_be_queued,
    )
    if signing_key is not None:
        payload.signature = _signature(payload, signing_key)
    return payload.model_dump_json()


def decode(body: str, registry: JobRegistry, signing_key: bytes | None = None) -> Executable:
    """Rebuild a runnable executable from its JSON string.

    With ``signing_key`` set, the payload signature is checked before the
    passable is unpickled.
    """
    try:
        payload = ExecutablePayload.model_validate_json(body)
    except ValidationError as exc:
        raise SerializationError(f"Malformed executable payload: {exc}") from exc

    if signing_key is not None:
        if payload.signature is None:
            raise SerializationError(f"Executable {payload.id} is not signed")
        if not hmac.compare_digest(payload.signature, _signature(payload, signing_key)):
            raise SerializationError(f"Executable {payload.id} has an invalid signature")

    try:
        passable = pickle.loads(base64.b64decode(payload.passable))
    except Exception as exc:
        raise SerializationError(f"Could not restore passable of executable {payload.id}: {exc}") from exc

    return Executable(
        jobs=[registry.from_reference(reference) for reference in payload.jobs],
        passable=passable,
        routing=payload.routing,
        should_be_queued=payload.should_be_queued,
        id=payload.id,
    )
