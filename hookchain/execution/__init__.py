"""Pre- and post-chain execution engines."""

from .outcome import Completion, Outcome, OutcomeKind
from .post import public_arguments, run_post_chain, run_post_chain_sync
from .pre import run_pre_chain, run_pre_chain_sync

__all__ = [
    "Completion",
    "Outcome",
    "OutcomeKind",
    "public_arguments",
    "run_post_chain",
    "run_post_chain_sync",
    "run_pre_chain",
    "run_pre_chain_sync",
]
