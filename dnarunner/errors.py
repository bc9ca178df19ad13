class DnaRunnerError(Exception):
    """Base class for errors that abort a scenario. `exit_code` is what the process exits with."""
    exit_code = 1


class NodeConnectionError(DnaRunnerError):
    """The node transport could not be established."""
    exit_code = 1


class CredentialError(DnaRunnerError):
    """Key file unreadable, malformed, or passphrase wrong."""
    exit_code = 2


class InsufficientBalance(DnaRunnerError):
    exit_code = 3

    def __init__(self, address, balance, threshold):
        super().__init__(f"Balance of {address} is {balance}, required at least {threshold}")
        self.address = address
        self.balance = balance
        self.threshold = threshold


class SubmissionFailure(DnaRunnerError):
    exit_code = 4

    def __init__(self, step, outcome):
        detail = f" ({outcome.detail})" if outcome.detail else ""
        super().__init__(f"Step '{step}' failed: {outcome.reason}{detail}")
        self.step = step
        self.outcome = outcome

    @property
    def reason(self):
        return self.outcome.reason


class EventNotFound(DnaRunnerError):
    exit_code = 5

    def __init__(self, step, module, event, block_hash=None):
        super().__init__(f"Step '{step}': event {module}.{event} not found in finalized block {block_hash}")
        self.step = step
        self.module = module
        self.event = event
        self.block_hash = block_hash


class InvalidCall(DnaRunnerError, ValueError):
    exit_code = 6


class CheckFailed(DnaRunnerError):
    """State read back from the chain after a step does not match what the step should have done."""
    exit_code = 7

    def __init__(self, step, message):
        super().__init__(f"Step '{step}': {message}")
        self.step = step
