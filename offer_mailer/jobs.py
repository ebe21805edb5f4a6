"""
Generated Letter Job Store

Holds generated offer letters in process memory between the generation and
dispatch requests. Each generation call commits its batch as a separate job,
so concurrent uploads never overwrite each other.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import get_config
from .exceptions import JobNotFoundError
from .utils import generate_job_id

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ('coordinator', 'coordinator_contact', 'location')


@dataclass
class GeneratedLetter:
    """One offer letter produced from one roster row"""
    name: str
    position: str
    start_date: str
    email: str
    pdf_bytes: bytes = field(repr=False)
    coordinator: Optional[str] = None
    coordinator_contact: Optional[str] = None
    location: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict, pdf_bytes: bytes) -> "GeneratedLetter":
        return cls(
            name=row.get('name', ''),
            position=row.get('position', ''),
            start_date=row.get('start_date', ''),
            email=row.get('email', ''),
            pdf_bytes=pdf_bytes,
            coordinator=row.get('coordinator') or None,
            coordinator_contact=row.get('coordinator_contact') or None,
            location=row.get('location') or None,
        )

    def to_metadata(self) -> dict:
        """Response representation: every field except the PDF bytes"""
        metadata = {
            'name': self.name,
            'email': self.email,
            'position': self.position,
            'start_date': self.start_date,
        }
        for key in OPTIONAL_FIELDS:
            value = getattr(self, key)
            if value:
                metadata[key] = value
        return metadata


@dataclass
class LetterJob:
    """A committed batch of generated letters"""
    job_id: str
    letters: List[GeneratedLetter]
    filename: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    expires_at: float = 0.0
    dispatch_count: int = 0

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at

    def summary(self) -> dict:
        return {
            'job_id': self.job_id,
            'filename': self.filename,
            'total_letters': len(self.letters),
            'created_at': self.created_at,
            'expires_at': self.expires_at,
            'dispatch_count': self.dispatch_count,
            'files': [letter.to_metadata() for letter in self.letters],
        }


class JobStore:
    """Thread-safe in-memory job registry with time-based expiry"""

    def __init__(self, ttl_seconds: int = 3600, clock=time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._jobs: Dict[str, LetterJob] = {}
        self._latest_job_id: Optional[str] = None
        self._lock = threading.Lock()

    def _purge_expired(self, now: float):
        expired = [job_id for job_id, job in self._jobs.items() if job.is_expired(now)]
        for job_id in expired:
            del self._jobs[job_id]
            logger.info(f"Job {job_id} expired and was discarded")
        if self._latest_job_id not in self._jobs:
            self._latest_job_id = None

    def create_job(self, letters: List[GeneratedLetter], filename: Optional[str] = None) -> LetterJob:
        """Commit a completed batch as a new job"""
        now = self._clock()
        job = LetterJob(
            job_id=generate_job_id(),
            letters=list(letters),
            filename=filename,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        with self._lock:
            self._purge_expired(now)
            self._jobs[job.job_id] = job
            self._latest_job_id = job.job_id
        logger.info(f"Job {job.job_id} stored with {len(job.letters)} letters")
        return job

    def get_job(self, job_id: str) -> LetterJob:
        """
        Look up a job by id

        Raises:
            JobNotFoundError: If the job does not exist or has expired
        """
        with self._lock:
            self._purge_expired(self._clock())
            job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def get_latest_job(self) -> Optional[LetterJob]:
        """Most recently generated job that has not expired, if any"""
        with self._lock:
            self._purge_expired(self._clock())
            if self._latest_job_id is None:
                return None
            return self._jobs[self._latest_job_id]

    def record_dispatch(self, job: LetterJob):
        with self._lock:
            job.dispatch_count += 1

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._jobs)


# Global job store instance
_job_store: Optional[JobStore] = None


def get_job_store() -> JobStore:
    """Get or create global job store"""
    global _job_store
    if _job_store is None:
        _job_store = JobStore(ttl_seconds=get_config().job_ttl_seconds)
    return _job_store
