import logging
from typing import Optional

from dispatch.batch_dispatcher import BatchDispatcher
from dispatch.messages import DEFAULT_BROADCAST_MESSAGE
from models.dispatch_options import DispatchOptions
from models.dispatch_report import RetryReport

logger = logging.getLogger("launch_notifier")

DEFAULT_MAX_ATTEMPTS = 3


class RetrySelector:
    def __init__(
        self,
        dispatcher: BatchDispatcher,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        send_timeout_seconds: float = 30.0,
    ):
        self.dispatcher = dispatcher
        self.max_attempts = max_attempts
        self.send_timeout_seconds = send_timeout_seconds

    async def retry_failed(
        self,
        max_attempts: Optional[int] = None,
        message: Optional[str] = None,
        send_timeout_seconds: Optional[float] = None,
    ) -> RetryReport:
        """
        Resends to recipients with 0 < attempts < max_attempts, all at once.
        Recipients at the ceiling are left for manual follow-up.
        """
        max_attempts = self.max_attempts if max_attempts is None else max_attempts
        send_timeout_seconds = send_timeout_seconds or self.send_timeout_seconds
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
            raise ValueError(f"max_attempts must be a positive integer, got {max_attempts!r}")

        self.dispatcher.sender.ensure_configured()

        store = self.dispatcher.store
        candidates = await store.list_retryable(max_attempts)

        exhausted = await store.list_failed(max_attempts)
        if exhausted:
            logger.warning(
                f"{len(exhausted)} recipient(s) reached {max_attempts} attempts and need manual follow-up: "
                + ", ".join(r.identity for r in exhausted[:10])
                + (" ..." if len(exhausted) > 10 else "")
            )

        if not candidates:
            logger.info("No failed notifications to retry.")
            return RetryReport(message="No failed notifications to retry", nothing_to_retry=True)

        self.dispatcher.sender.ensure_configured({r.effective_channel for r in candidates})

        logger.info(f"Retrying {len(candidates)} failed notifications (max attempts: {max_attempts})")
        options = DispatchOptions(
            batch_size=len(candidates),
            delay_between_batches_ms=0,
            send_timeout_seconds=send_timeout_seconds,
        )
        report = await self.dispatcher.run(candidates, message or DEFAULT_BROADCAST_MESSAGE, options)
        logger.info(f"Retry complete. Sent: {report.sent_count}, Failed: {report.failed_count}")

        return RetryReport(
            message=f"Retried {len(candidates)} failed notifications",
            retried=len(candidates),
            report=report,
        )
