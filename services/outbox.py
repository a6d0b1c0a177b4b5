"""
Notification Outbox
Outgoing emails are queued by request handlers and delivered by one daemon
worker thread, so mail latency or failures never reach the HTTP response.
"""
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger('outbox')


@dataclass
class OutboundEmail:
    to_email: str
    subject: str
    body: str
    reference: Optional[str] = None


class NotificationOutbox:
    """
    Queue of outbound emails drained by a background worker.

    With sync=True jobs are delivered inline on enqueue (used by tests);
    delivery errors are logged and dropped in both modes.
    """

    def __init__(self, mailer, sync: bool = False):
        self.mailer = mailer
        self.sync = sync
        self._queue = queue.Queue()
        self._worker = None
        self._lock = threading.Lock()

    def start(self):
        if self.sync:
            return
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(target=self._run, daemon=True, name="notification-outbox")
            self._worker.start()
        logger.info("OUTBOX_STARTED | worker=notification-outbox")

    def stop(self, timeout: float = 5.0):
        """Deliver what is queued, then stop the worker"""
        if self._worker is None:
            return
        self._queue.put(None)
        self._worker.join(timeout)
        self._worker = None

    def enqueue(self, to_email: str, subject: str, body: str, reference: Optional[str] = None):
        job = OutboundEmail(to_email=to_email, subject=subject, body=body, reference=reference)
        if self.sync:
            self._deliver(job)
            return
        self._queue.put(job)
        logger.info(f"OUTBOX_QUEUED | {reference or '-'} | to={to_email} | pending={self._queue.qsize()}")

    def flush(self):
        """Block until every queued job has been attempted"""
        if not self.sync:
            self._queue.join()

    def _run(self):
        while True:
            job = self._queue.get()
            try:
                if job is None:
                    return
                self._deliver(job)
            finally:
                self._queue.task_done()

    def _deliver(self, job: OutboundEmail):
        try:
            result = self.mailer.send_email(job.to_email, job.subject, job.body)
        except Exception as e:
            logger.error(f"OUTBOX_DELIVERY_ERROR | {job.reference or '-'} | to={job.to_email} | {type(e).__name__}: {e}")
            return

        if result.get('success'):
            logger.info(f"OUTBOX_DELIVERED | {job.reference or '-'} | to={job.to_email}")
        else:
            logger.warning(f"OUTBOX_DELIVERY_FAILED | {job.reference or '-'} | to={job.to_email} | {result.get('message')}")
