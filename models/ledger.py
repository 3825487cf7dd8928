"""
In-memory sales ledger mirrored to a single durable slot.

Records are kept newest-first. Every mutation writes the whole ledger back to
the slot; a failed write is logged and the in-memory state is kept.
"""
import json
import logging
import math
import time
import uuid
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from utils.file_manager import read_slot, write_slot

LOG = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "dailySales"

Number = Union[int, float]


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Transaction:
    """One sale event."""
    id: str
    name: str
    quantity: int
    price: Number
    timestamp: int

    @property
    def total(self) -> Number:
        return self.quantity * self.price

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "Transaction":
        if not isinstance(data, dict):
            raise ValueError(f"Transaction record must be an object, got {type(data).__name__}")
        try:
            name = str(data["name"]).strip()
            quantity = _as_number(data["quantity"])
            price = _as_number(data["price"])
            tx = cls(
                id=str(data["id"]),
                name=name,
                quantity=quantity,
                price=price,
                timestamp=int(data["timestamp"]),
            )
        except KeyError as e:
            raise ValueError(f"Transaction record missing field {e}") from e
        if not name:
            raise ValueError("Transaction record has a blank name")
        if not isinstance(quantity, int) or quantity < 1:
            raise ValueError(f"Transaction quantity must be a whole number >= 1, got {quantity!r}")
        if price < 0:
            raise ValueError(f"Transaction price must be >= 0, got {price!r}")
        return tx


def _as_number(value) -> Number:
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    num = float(value)
    if not math.isfinite(num):
        raise ValueError(f"not a finite number: {value!r}")
    return int(num) if num.is_integer() else num


class Ledger:
    def __init__(self, storage_key: str = DEFAULT_STORAGE_KEY, clock: Optional[Callable[[], int]] = None):
        self.storage_key = storage_key
        self._clock = clock or now_ms
        self._transactions: List[Transaction] = []

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._transactions))

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return tuple(self._transactions)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for t in self._transactions:
            if t.id == transaction_id:
                return t
        return None

    def load(self) -> List[Transaction]:
        """Read the slot into memory. Anything missing or malformed gives an empty ledger."""
        self._transactions = self._read()
        return list(self._transactions)

    def _read(self) -> List[Transaction]:
        try:
            raw = read_slot(self.storage_key)
        except (OSError, ValueError):
            LOG.exception("Failed to read transactions from slot %r", self.storage_key)
            return []
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            records = [Transaction.from_dict(r) for r in data]
        except (TypeError, ValueError):
            LOG.exception("Failed to parse transactions from slot %r", self.storage_key)
            return []
        # keep the first occurrence of any duplicated id
        seen = set()
        unique = []
        for r in records:
            if r.id not in seen:
                seen.add(r.id)
                unique.append(r)
        return unique

    def persist(self) -> bool:
        """Write the full ledger to the slot. Returns False (after logging) on failure."""
        try:
            text = json.dumps([t.to_dict() for t in self._transactions])
            write_slot(self.storage_key, text)
        except (OSError, TypeError, ValueError):
            LOG.exception("Failed to save transactions to slot %r", self.storage_key)
            return False
        return True

    def add(self, name, quantity, price) -> Optional[Transaction]:
        """Prepend a new sale. Blank names and non-positive quantity or price are ignored."""
        name = name.strip() if isinstance(name, str) else ""
        try:
            qty = _as_number(quantity)
            unit_price = _as_number(price)
        except (TypeError, ValueError):
            return None
        if not name or int(qty) <= 0 or unit_price <= 0:
            return None
        tx = Transaction(
            id=str(uuid.uuid4()),
            name=name,
            quantity=int(qty),
            price=unit_price,
            timestamp=self._clock(),
        )
        self._transactions.insert(0, tx)
        LOG.info("Recorded sale %s: %d x %s", tx.id, tx.quantity, tx.price)
        self.persist()
        return tx

    def remove(self, transaction_id: str) -> bool:
        before = len(self._transactions)
        self._transactions = [t for t in self._transactions if t.id != transaction_id]
        removed = len(self._transactions) < before
        if removed:
            LOG.info("Removed sale %s", transaction_id)
        self.persist()
        return removed

    def clear_up_to(self, cutoff: int) -> int:
        """Drop every record stamped at or after `cutoff` (epoch ms)."""
        kept = [t for t in self._transactions if t.timestamp < cutoff]
        removed = len(self._transactions) - len(kept)
        self._transactions = kept
        LOG.info("Cleared %d sale(s) from %d onwards", removed, cutoff)
        self.persist()
        return removed
