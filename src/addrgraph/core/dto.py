from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class TransactionInput:
    address: Optional[str] = None      # unresolvable prevout -> None
    value: Optional[int] = None        # satoshis


@dataclass(frozen=True)
class TransactionOutput:
    address: Optional[str] = None
    value: Optional[int] = None        # satoshis


@dataclass(frozen=True)
class Transaction:
    hash: str
    inputs: List[TransactionInput] = field(default_factory=list)
    outputs: List[TransactionOutput] = field(default_factory=list)
    net_result: int = 0                # satoshis, relative to the subject address
    time: Optional[int] = None         # unix seconds, None while unconfirmed


@dataclass(frozen=True)
class AddressSummary:
    address: str
    transaction_count: int
    total_received: int
    total_sent: int
    final_balance: int
    transactions: List[Transaction] = field(default_factory=list)


def net_result_for(address: str, inputs: List[TransactionInput], outputs: List[TransactionOutput]) -> int:
    """
    Satoshis paid to `address` by this transaction minus satoshis it spent.
    """
    received = sum(o.value or 0 for o in outputs if o.address == address)
    spent = sum(i.value or 0 for i in inputs if i.address == address)
    return received - spent
