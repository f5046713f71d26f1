"""SQS queue backend implementing IQueueBackend."""

from __future__ import annotations

import math

import boto3
from botocore.exceptions import ClientError

from jobpipeline.core.exceptions import QueueBackendError
from jobpipeline.models.pipeline import FailedJob, ReservedJob


class SQSQueueBackend:
    """Production IQueueBackend backed by SQS.

    Queue names map to ``{queue_prefix}{name}``; buried messages go to the
    ``{name}{failed_suffix}`` queue, which must exist. Delays longer than
    SQS allows are rejected rather than shortened.
    """

    MAX_DELAY_SECONDS = 900  # SQS DelaySeconds ceiling

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None,
                 queue_prefix: str = "", wait_time_seconds: int = 0,
                 failed_suffix: str = "-failed") -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        self._prefix = queue_prefix
        self._wait_time_seconds = wait_time_seconds
        self._failed_suffix = failed_suffix
        self._urls: dict[str, str] = {}
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("sqs", **kwargs)

    def _url(self, queue: str) -> str:
        if queue not in self._urls:
            resp = self._client.get_queue_url(QueueName=f"{self._prefix}{queue}")
            self._urls[queue] = resp["QueueUrl"]
        return self._urls[queue]

    def push(self, queue: str, body: str, delay: float = 0) -> str:
        delay_seconds = math.ceil(max(delay, 0))
        if delay_seconds > self.MAX_DELAY_SECONDS:
            raise QueueBackendError(
                f"SQS cannot delay a message by {delay_seconds}s "
                f"(maximum {self.MAX_DELAY_SECONDS}s) for queue={queue!r}"
            )
        try:
            resp = self._client.send_message(
                QueueUrl=self._url(queue), MessageBody=body, DelaySeconds=delay_seconds,
            )
            return resp["MessageId"]
        except ClientError as exc:
            raise QueueBackendError(f"SQS send failed for queue={queue!r}: {exc}") from exc

    def pop(self, queue: str) -> ReservedJob | None:
        try:
            resp = self._client.receive_message(
                QueueUrl=self._url(queue),
                MaxNumberOfMessages=1,
                WaitTimeSeconds=self._wait_time_seconds,
                AttributeNames=["ApproximateReceiveCount"],
            )
        except ClientError as exc:
            raise QueueBackendError(f"SQS receive failed for queue={queue!r}: {exc}") from exc
        messages = resp.get("Messages", [])
        if not messages:
            return None
        message = messages[0]
        return ReservedJob(
            id=message["MessageId"],
            queue=queue,
            body=message["Body"],
            attempts=int(message.get("Attributes", {}).get("ApproximateReceiveCount", 1)),
            receipt=message["ReceiptHandle"],
        )

    def delete(self, job: ReservedJob) -> None:
        try:
            self._client.delete_message(QueueUrl=self._url(job.queue), ReceiptHandle=job.receipt)
        except ClientError as exc:
            raise QueueBackendError(f"SQS delete failed for job={job.id!r}: {exc}") from exc

    def release(self, job: ReservedJob, delay: float = 0) -> None:
        try:
            self._client.change_message_visibility(
                QueueUrl=self._url(job.queue),
                ReceiptHandle=job.receipt,
                VisibilityTimeout=math.ceil(max(delay, 0)),
            )
        except ClientError as exc:
            raise QueueBackendError(f"SQS release failed for job={job.id!r}: {exc}") from exc

    def bury(self, job: ReservedJob, error: str) -> None:
        failed = FailedJob(id=job.id, queue=job.queue, body=job.body, error=error, attempts=job.attempts)
        try:
            self._client.send_message(
                QueueUrl=self._url(f"{job.queue}{self._failed_suffix}"),
                MessageBody=failed.model_dump_json(),
            )
        except ClientError as exc:
            raise QueueBackendError(f"SQS bury failed for job={job.id!r}: {exc}") from exc
        self.delete(job)

    def _count(self, queue: str) -> int:
        try:
            resp = self._client.get_queue_attributes(
                QueueUrl=self._url(queue),
                AttributeNames=["ApproximateNumberOfMessages", "ApproximateNumberOfMessagesDelayed"],
            )
        except ClientError as exc:
            raise QueueBackendError(f"SQS attributes failed for queue={queue!r}: {exc}") from exc
        attributes = resp.get("Attributes", {})
        return int(attributes.get("ApproximateNumberOfMessages", 0)) + int(
            attributes.get("ApproximateNumberOfMessagesDelayed", 0)
        )

    def size(self, queue: str) -> int:
        return self._count(queue)

    def failed_count(self, queue: str) -> int:
        return self._count(f"{queue}{self._failed_suffix}")

    def ping(self) -> bool:
        try:
            if self._prefix:
                self._client.list_queues(QueueNamePrefix=self._prefix)
            else:
                self._client.list_queues()
        except ClientError as exc:
            raise QueueBackendError(f"SQS ping failed: {exc}") from exc
        return True
