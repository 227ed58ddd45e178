import asyncio
import logging
from typing import List, Optional

from dispatch.delivery_tracker import DeliveryTracker
from dispatch.errors import StoreWriteError
from dispatch.messages import DEFAULT_BROADCAST_MESSAGE
from models.channel import SendResult
from models.dispatch_options import DispatchOptions
from models.dispatch_report import DispatchReport, FailedDelivery, FailureStage, PendingPreview
from models.recipient import Recipient
from senders.base_sender import BaseSender
from stores.base_store import RecipientStore
from utils.batching import batch_count, chunked

logger = logging.getLogger("launch_notifier")


class BatchDispatcher:
    def __init__(self, store: RecipientStore, sender: BaseSender, tracker: Optional[DeliveryTracker] = None):
        self.store = store
        self.sender = sender
        self.tracker = tracker or DeliveryTracker(store)

    async def dispatch(self, message: Optional[str] = None, options: Optional[DispatchOptions] = None) -> DispatchReport:
        """
        Sends `message` (or the default launch announcement) to every pending
        recipient, oldest subscription first, in batches of `options.batch_size`.
        """
        options = options or DispatchOptions()
        message = message or DEFAULT_BROADCAST_MESSAGE

        # 1. Preconditions: missing credentials abort before any recipient is touched
        if not options.dry_run:
            self.sender.ensure_configured()

        # 2. Resolve pending recipients
        pending = await self.store.list_pending()
        if not pending:
            logger.info("No pending subscribers to notify.")
            return DispatchReport(message="No pending subscribers to notify", dry_run=options.dry_run)

        # Every channel the pending set needs must be deliverable before the first batch
        if not options.dry_run:
            self.sender.ensure_configured({r.effective_channel for r in pending})

        logger.info("=" * 80)
        logger.info(f"Starting launch notifications for {len(pending)} subscribers")
        logger.info(f"   Batch size: {options.batch_size}")
        logger.info(f"   Delay between batches: {options.delay_between_batches_ms}ms")
        logger.info("=" * 80)

        # 3. Dry run: report who would be contacted, no side effects
        if options.dry_run:
            logger.warning(f"DRY RUN - would send to {len(pending)} subscribers; nothing sent")
            return DispatchReport(
                dry_run=True,
                message=f"Would send to {len(pending)} subscribers",
                total_considered=len(pending),
                batches=batch_count(len(pending), options.batch_size),
                would_contact=[
                    PendingPreview(identity=r.identity, channel_kind=r.effective_channel)
                    for r in pending
                ],
            )

        # 4. Send
        report = await self.run(pending, message, options)
        logger.info("=" * 80)
        logger.info("LAUNCH NOTIFICATIONS COMPLETE")
        logger.info(f"   Total: {report.total_considered}")
        logger.info(f"   Sent: {report.sent_count}")
        logger.info(f"   Failed: {report.failed_count}")
        if report.store_failures:
            logger.error(f"   Outcomes not recorded (store errors): {len(report.store_failures)}")
        logger.info("=" * 80)
        return report

    async def run(self, recipients: List[Recipient], message: str, options: DispatchOptions) -> DispatchReport:
        """
        Batch loop shared by dispatch and retry. Every recipient in a batch is
        sent concurrently and the batch completes only once all of them resolve.
        """
        total = len(recipients)
        total_batches = batch_count(total, options.batch_size)
        sent: List[str] = []
        failed: List[FailedDelivery] = []
        processed = 0

        for index, batch in enumerate(chunked(recipients, options.batch_size), start=1):
            logger.info(f"Processing batch {index}/{total_batches}...")
            outcomes = await asyncio.gather(
                *(self.send_and_track(r, message, options.send_timeout_seconds) for r in batch)
            )

            for recipient, failure in zip(batch, outcomes):
                if failure is None:
                    sent.append(recipient.identity)
                else:
                    failed.append(failure)

            processed += len(batch)
            logger.info(f"Progress: {processed}/{total}")

            # Delay between batches to respect provider rate limits
            if index < total_batches and options.delay_between_batches_ms:
                logger.debug(f"Waiting {options.delay_between_batches_ms}ms before next batch...")
                await asyncio.sleep(options.delay_seconds)

        return DispatchReport(
            message="Launch notifications completed",
            total_considered=total,
            sent_count=len(sent),
            failed_count=len(failed),
            batches=total_batches,
            sent=sent,
            failed=failed,
        )

    async def send_and_track(self, recipient: Recipient, message: str, timeout_seconds: float) -> Optional[FailedDelivery]:
        """Returns None when the recipient was notified, otherwise the failure to report."""
        identity = recipient.identity
        try:
            result = await asyncio.wait_for(
                self.sender.send(identity, recipient.channel_kind, message),
                timeout=timeout_seconds,
            )
        except asyncio.TimeoutError:
            result = SendResult.failed(f"Send timed out after {timeout_seconds}s")
        except Exception as e:
            result = SendResult.failed(str(e) or e.__class__.__name__)

        try:
            if result.success:
                await self.tracker.mark_notified(recipient)
                logger.debug(f"   Sent to {identity} ({result.provider_message_id})")
                return None

            error = result.error or "Unknown delivery error"
            logger.error(f"   Failed to notify {identity}: {error}")
            await self.tracker.record_failed_attempt(recipient, error)
            return FailedDelivery(identity=identity, error=error)

        except StoreWriteError as e:
            logger.error(f"   Could not record outcome for {identity}: {e.reason}")
            error = str(e) if result.success else f"{result.error}; {e}"
            return FailedDelivery(identity=identity, error=error, stage=FailureStage.STORE)
