from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum

from models.channel import ChannelKind

class FailureStage(str, Enum):
    SEND = "send"
    STORE = "store"

class FailedDelivery(BaseModel):
    identity: str
    error: str
    stage: FailureStage = FailureStage.SEND

class PendingPreview(BaseModel):
    identity: str
    channel_kind: ChannelKind

class DispatchReport(BaseModel):
    success: bool = True
    message: str
    dry_run: bool = False
    total_considered: int = 0
    sent_count: int = 0
    failed_count: int = 0
    batches: int = 0
    sent: List[str] = Field(default_factory=list)
    failed: List[FailedDelivery] = Field(default_factory=list)
    would_contact: List[PendingPreview] = Field(default_factory=list)

    @property
    def store_failures(self) -> List[FailedDelivery]:
        return [f for f in self.failed if f.stage == FailureStage.STORE]

class RetryReport(BaseModel):
    success: bool = True
    message: str
    nothing_to_retry: bool = False
    retried: int = 0
    report: Optional[DispatchReport] = None
