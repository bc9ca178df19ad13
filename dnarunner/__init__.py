from .accounts import resolve_descriptor, resolve_from_file, resolve_from_mnemonic
from .chain import Chain
from .context import Orchestration
from .errors import (CheckFailed, CredentialError, DnaRunnerError, EventNotFound, InsufficientBalance, InvalidCall,
                     NodeConnectionError, SubmissionFailure)
from .funding import ensure_funded, require_balance
from .nonce import NonceTracker
from .submitter import FailureReason, Outcome, Submitter
from .watcher import ExtrinsicWatcher
