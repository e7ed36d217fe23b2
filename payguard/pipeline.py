"""End-to-end processing of captured payment messages.

``TransactionPipeline`` wires validation, conflict detection, duplicate
detection and retried persistence into a single call:

    message -> TransactionValidator -> ConflictDetector
            -> TransactionDuplicateDetector -> persist (via RetryExecutor)

Expected outcomes (rejections, duplicates, flags) come back as a
``PipelineOutcome``; only persistence faults go through the retry engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Union

from payguard.config import Config, get_config
from payguard.dedup.batch import find_repeats
from payguard.dedup.conflict import ConflictDetector
from payguard.dedup.detector import TransactionDuplicateDetector
from payguard.dedup.result import ConflictResult, ConflictType, DuplicateCheckResult, DuplicateType
from payguard.errors.classifier import ErrorClassifier
from payguard.errors.error_log import ErrorLog
from payguard.errors.recovery import RecoveryStrategy, RecoveryStrategyResolver, UserPrompt
from payguard.errors.types import AppError, ErrorType
from payguard.models import Message, TransactionRecord
from payguard.utils.logger import log_pipeline_decision, mask_phone
from payguard.utils.retry import RetryExecutor, create_transaction_retry_executor
from payguard.validation.phone import extract_phone
from payguard.validation.result import ValidationFlag, ValidationResult
from payguard.validation.transaction import TransactionValidator

PersistCallback = Callable[[TransactionRecord], Union[Any, Awaitable[Any]]]


class Decision(str, Enum):
    """What the caller should do with a message."""

    ACCEPTED = "accepted"  # store
    FLAGGED = "flagged"  # store, mark for review
    REJECTED = "rejected"  # discard, not a valid transaction
    DUPLICATE = "duplicate"  # discard, already seen


@dataclass
class PipelineOutcome:
    """Everything the pipeline learned about one message.

    Attributes:
        decision: Final ``Decision``
        message: The processed message
        validation: Validator result (always present)
        conflict: Conflict against stored records, ``None`` when rejected
        duplicate: Detector result, ``None`` when rejected
        record: Record built for persistence, ``None`` when rejected
        persisted: Whether ``persist`` completed successfully
        error: Classified reason for rejection, duplication, flagging or
            persistence failure
        recovery: Recovery strategy for ``error``
        prompt: How ``error`` should be surfaced to the user
    """

    decision: Decision
    message: Message
    validation: Optional[ValidationResult] = None
    conflict: Optional[ConflictResult] = None
    duplicate: Optional[DuplicateCheckResult] = None
    record: Optional[TransactionRecord] = None
    persisted: bool = False
    error: Optional[AppError] = None
    recovery: Optional[RecoveryStrategy] = None
    prompt: Optional[UserPrompt] = None
    reasons: List[str] = field(default_factory=list)

    @property
    def stored(self) -> bool:
        return self.decision in (Decision.ACCEPTED, Decision.FLAGGED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decision": self.decision.value,
            "message": self.message.to_dict(),
            "validation": self.validation.to_dict() if self.validation else None,
            "conflict": self.conflict.to_dict() if self.conflict else None,
            "duplicate": self.duplicate.to_dict() if self.duplicate else None,
            "record": self.record.to_dict() if self.record else None,
            "persisted": self.persisted,
            "error": self.error.to_dict() if self.error else None,
            "recovery": self.recovery.to_dict() if self.recovery else None,
            "prompt": self.prompt.to_dict() if self.prompt else None,
            "reasons": list(self.reasons),
        }


class TransactionPipeline:
    """Validate, de-duplicate and optionally persist captured messages.

    Every collaborator can be injected; missing ones are built from
    ``config``.  The duplicate detector keeps per-session history, so reuse
    one pipeline for the whole session and feed it messages in arrival
    order.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        validator: Optional[TransactionValidator] = None,
        conflict_detector: Optional[ConflictDetector] = None,
        duplicate_detector: Optional[TransactionDuplicateDetector] = None,
        retry_executor: Optional[RetryExecutor] = None,
        error_log: Optional[ErrorLog] = None,
        classifier: Optional[ErrorClassifier] = None,
        resolver: Optional[RecoveryStrategyResolver] = None,
    ):
        self.config = config or get_config()
        self.validator = validator or TransactionValidator(self.config)
        self.conflict_detector = conflict_detector or ConflictDetector(
            self.config, self.validator.amount_validator
        )
        self.duplicate_detector = duplicate_detector or TransactionDuplicateDetector(self.config)
        self.classifier = classifier or ErrorClassifier()
        self.resolver = resolver or RecoveryStrategyResolver()
        self.retry_executor = retry_executor or create_transaction_retry_executor(
            self.config, classifier=self.classifier, resolver=self.resolver
        )
        self.error_log = error_log if error_log is not None else ErrorLog(self.config.error_log_max_size)

    async def process(
        self,
        message: Message,
        existing_records: Iterable[TransactionRecord] = (),
        persist: Optional[PersistCallback] = None,
    ) -> PipelineOutcome:
        """Classify one message and persist it when it should be stored."""
        phone = message.phone or extract_phone(message.raw_text)
        validation = self.validator.validate(
            message.raw_text, phone, sender_address=message.sender_address or None
        )

        if not validation.valid:
            outcome = PipelineOutcome(Decision.REJECTED, message, validation=validation)
            outcome.reasons.extend(validation.errors)
            self._attach_error(
                outcome,
                self.classifier.classify(
                    "; ".join(validation.errors),
                    {"type": self._rejection_hint(validation), "phone": mask_phone(phone or "")},
                ),
            )
            return self._finish(outcome)

        timestamp = message.arrival_timestamp
        conflict = self.conflict_detector.detect(
            validation.phone, validation.amount, timestamp, existing_records
        )
        duplicate = self.duplicate_detector.is_duplicate(message.raw_text, validation.phone, timestamp)
        record = TransactionRecord(
            phone=validation.phone,
            raw_message=message.raw_text,
            timestamp=timestamp,
            amount=validation.amount,
        )
        outcome = PipelineOutcome(
            Decision.ACCEPTED,
            message,
            validation=validation,
            conflict=conflict,
            duplicate=duplicate,
            record=record,
        )
        self._classify(outcome)

        if outcome.stored and persist is not None:
            try:
                await self.retry_executor.run(lambda: persist(record), name="persist_transaction")
                outcome.persisted = True
            except AppError as exc:
                outcome.reasons.append(f"Persistence failed: {exc.message}")
                self._attach_error(outcome, exc)

        # Failed saves stay out of the history.
        if outcome.stored and (persist is None or outcome.persisted):
            self.duplicate_detector.register_message(message.raw_text, validation.phone, timestamp)

        return self._finish(outcome)

    async def process_batch(
        self,
        messages: Sequence[Message],
        existing_records: Iterable[TransactionRecord] = (),
        persist: Optional[PersistCallback] = None,
    ) -> List[PipelineOutcome]:
        """Process a batch in arrival order; outcomes line up with ``messages``.

        Exact content repeats inside the batch are not processed and get a
        DUPLICATE outcome.  Records stored earlier in the batch take part in
        conflict detection for later messages.
        """
        messages = list(messages)
        records = list(existing_records)
        repeats = set(find_repeats(messages))
        survivors = sorted(
            (index for index in range(len(messages)) if index not in repeats),
            key=lambda index: messages[index].arrival_timestamp,
        )

        outcomes: List[Optional[PipelineOutcome]] = [None] * len(messages)
        for index in survivors:
            outcome = await self.process(messages[index], records, persist)
            if outcome.stored and outcome.record is not None and (persist is None or outcome.persisted):
                records.append(outcome.record)
            outcomes[index] = outcome

        for index in sorted(repeats):
            outcome = PipelineOutcome(Decision.DUPLICATE, messages[index])
            outcome.reasons.append("Repeats an earlier message in the batch")
            self._attach_error(outcome, AppError(ErrorType.DUPLICATE_MESSAGE))
            outcomes[index] = self._finish(outcome)

        return outcomes

    def _classify(self, outcome: PipelineOutcome) -> None:
        """Set decision and error for a valid message from its dedup results."""
        conflict, duplicate, validation = outcome.conflict, outcome.duplicate, outcome.validation

        if conflict.type == ConflictType.EXACT_DUPLICATE:
            outcome.decision = Decision.DUPLICATE
            outcome.reasons.append(
                f"Matches a stored transaction (confidence {conflict.confidence_score})"
            )
            self._attach_error(outcome, AppError(ErrorType.DUPLICATE_TRANSACTION))
        elif duplicate.type in (DuplicateType.EXACT, DuplicateType.SIMILAR):
            outcome.decision = Decision.DUPLICATE
            outcome.reasons.append(f"{duplicate.type.value.capitalize()} duplicate of a recent message")
            self._attach_error(outcome, AppError(ErrorType.DUPLICATE_MESSAGE))
        elif conflict.type == ConflictType.SIMILAR_TRANSACTION:
            outcome.decision = Decision.FLAGGED
            outcome.reasons.append("Similar transaction recorded recently")
            self._attach_error(outcome, AppError(ErrorType.CONFLICT_DETECTED))
        elif duplicate.type == DuplicateType.BURST:
            outcome.decision = Decision.FLAGGED
            outcome.reasons.append("Burst of messages from the same phone")
            self._attach_error(outcome, AppError(ErrorType.SUSPICIOUS_PATTERN))
        elif validation.flags:
            outcome.decision = Decision.FLAGGED
            outcome.reasons.extend(f.value for f in validation.flags)
            error_type = (
                ErrorType.UNTRUSTED_SENDER
                if ValidationFlag.LOW_AUTHENTICITY in validation.flags
                else ErrorType.SUSPICIOUS_PATTERN
            )
            self._attach_error(outcome, AppError(error_type))

    @staticmethod
    def _rejection_hint(validation: ValidationResult) -> str:
        if any(e.startswith("No amount") for e in validation.errors):
            return "missing_data"
        if any("amount" in e.lower() for e in validation.errors):
            return "invalid_amount"
        return "invalid_phone"

    def _attach_error(self, outcome: PipelineOutcome, error: AppError) -> None:
        outcome.error = error
        outcome.recovery = self.resolver.resolve(error)
        outcome.prompt = self.resolver.prompt_for(error)
        self.error_log.add(error)

    def _finish(self, outcome: PipelineOutcome) -> PipelineOutcome:
        log_pipeline_decision(
            outcome.decision.value,
            phone=mask_phone(outcome.record.phone) if outcome.record else None,
            amount=outcome.validation.amount if outcome.validation else None,
            persisted=outcome.persisted,
            error_type=outcome.error.type.value if outcome.error else None,
        )
        return outcome
