"""
Atomic execution of swap instructions against in-memory collaborators.

The processor assumes its host commits or discards every effect of one
invocation together. ``ExecutionEnvironment`` is that host for the in-memory
ledger and repository: it snapshots both, runs the processor, and restores
both snapshots if anything raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..config import SwapConfig
from ..core.constraints import SwapConstraints
from ..core.errors import LedgerError, SwapError
from ..state.accounts import Address, require_address
from ..state.repository import InMemoryPoolRepository
from .client import InstructionRequest
from .ledger import InMemoryLedger
from .processor import Processor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvokeResult:
    ok: bool
    error: Optional[Union[SwapError, LedgerError]] = None


class ExecutionEnvironment:
    def __init__(
        self,
        program_id: Address,
        ledger: InMemoryLedger,
        repository: InMemoryPoolRepository,
        *,
        constraints: SwapConstraints = SwapConstraints(),
    ) -> None:
        self.program_id = require_address("program_id", program_id)
        self.ledger = ledger
        self.repository = repository
        self.processor = Processor(self.program_id, ledger, repository, constraints=constraints)

    @classmethod
    def from_config(
        cls,
        config: SwapConfig,
        ledger: InMemoryLedger,
        repository: InMemoryPoolRepository,
    ) -> "ExecutionEnvironment":
        """Build an environment for the program id and creation constraints in ``config``."""
        return cls(config.program_id, ledger, repository, constraints=config.constraints)

    def invoke_or_raise(self, request: InstructionRequest, signers: Iterable[Address] = ()) -> None:
        """
        Run one instruction atomically.

        Signers are the accounts flagged ``is_signer`` in the request plus any
        extra ``signers``.

        Raises:
            SwapError: the processor rejected the instruction
            LedgerError: the ledger refused one of the issued commands
        """
        if request.program_id != self.program_id:
            raise ValueError("request is addressed to another program")

        signer_set = {meta.address for meta in request.accounts if meta.is_signer}
        signer_set.update(require_address("signer", s) for s in signers)

        ledger_snapshot = self.ledger.snapshot()
        repository_snapshot = self.repository.snapshot()
        self.ledger.set_signers(signer_set)
        try:
            self.processor.process([meta.address for meta in request.accounts], request.data)
        except Exception as exc:
            self.ledger.restore(ledger_snapshot)
            self.repository.restore(repository_snapshot)
            logger.warning("instruction rolled back: %s", exc)
            raise
        finally:
            self.ledger.set_signers(())

    def invoke(self, request: InstructionRequest, signers: Iterable[Address] = ()) -> InvokeResult:
        try:
            self.invoke_or_raise(request, signers)
        except (SwapError, LedgerError) as exc:
            return InvokeResult(ok=False, error=exc)
        return InvokeResult(ok=True)
