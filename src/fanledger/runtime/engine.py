from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from fanledger.ledger import assets, certificates
from fanledger.ledger.constants import DEFAULT_OPERATOR_ADDRESS, ROUTING_POLICIES, ROUTING_REGISTRY
from fanledger.ledger.epochs import epoch_of
from fanledger.ledger.holder_auth import ADMIN_SCOPE, consume_nonce, holder_key, holder_scope, last_nonce, register_holder_key
from fanledger.ledger.penalty import PenaltyResult, calculate_penalty
from fanledger.ledger.state import LedgerView, append_event, ensure_params, norm_address
from fanledger.ledger.wallets import (
    AuthPredicate,
    WalletConfig,
    configure_wallets,
    update_dynamic_recipients,
    wallet_config,
    wallet_snapshot,
)
from fanledger.runtime import metrics
from fanledger.runtime.deposit import apply_deposit
from fanledger.runtime.errors import InvalidRecipient, LedgerError
from fanledger.runtime.redeem import apply_redeem
from fanledger.runtime.sqlite_db import SqliteDB, SqliteLedgerStore
from fanledger.structured_logging import log_event

Json = Dict[str, Any]

log = logging.getLogger("fanledger.engine")


def _unix_now() -> int:
    return int(time.time())


class EngineError(RuntimeError):
    pass


class SettlementEngine:
    """Single-writer ledger engine.

    All mutations are serialized on one re-entrant lock. Each runs against a
    deep copy of the committed state; the copy becomes the committed state
    (and is persisted, when a database is attached) only if the operation
    returns normally. Readers take the same lock and so only ever observe
    committed snapshots: never three of eight deposit legs, never a
    half-replaced set of dynamic recipients.
    """

    def __init__(
        self,
        *,
        wallets: WalletConfig,
        is_authorized: AuthPredicate,
        settlement_reserve: str,
        operator: str = DEFAULT_OPERATOR_ADDRESS,
        routing_policy: str = ROUTING_REGISTRY,
        clock: Optional[Callable[[], int]] = None,
        db_path: Optional[str] = None,
    ) -> None:
        reserve = norm_address(settlement_reserve)
        if reserve is None:
            raise InvalidRecipient("null_settlement_reserve", {})
        op = norm_address(operator)
        if op is None:
            raise InvalidRecipient("null_operator", {})
        policy = str(routing_policy or "").strip().lower()
        if policy not in ROUTING_POLICIES:
            raise EngineError(f"routing_policy must be one of {ROUTING_POLICIES}; got: {routing_policy!r}")

        self.settlement_reserve = reserve
        self.operator = op
        self.routing_policy = policy
        self._is_authorized = is_authorized
        self._clock = clock or _unix_now
        self._lock = threading.RLock()

        self._store: Optional[SqliteLedgerStore] = None
        self._events: List[Json] = []

        if db_path:
            self._store = SqliteLedgerStore(db=SqliteDB(path=str(db_path)))

        if self._store is not None and self._store.exists():
            self.state = self._store.read()
            self._check_loaded_state(wallets)
        else:
            self.state = self._initial_state(wallets)
            if self._store is not None:
                self._store.commit(self.state)

        log_event(
            log,
            "engine_started",
            persistent=self._store is not None,
            operator=self.operator,
            settlement_reserve=self.settlement_reserve,
            routing_policy=self.routing_policy,
        )

    def _initial_state(self, wallets: WalletConfig) -> Json:
        st: Json = {"event_seq": 0}
        configure_wallets(st, wallets)
        params = ensure_params(st)
        params["operator"] = self.operator
        params["settlement_reserve"] = self.settlement_reserve
        params["routing_policy"] = self.routing_policy
        return st

    def _check_loaded_state(self, wallets: WalletConfig) -> None:
        """Fail-closed if the persisted ledger belongs to a different deployment."""
        stored = wallet_config(self.state)
        if stored.fixed != wallets.fixed:
            raise EngineError("fixed recipients in database do not match configuration. Refuse to start.")
        params = ensure_params(self.state)
        for key, want in (("operator", self.operator), ("settlement_reserve", self.settlement_reserve)):
            have = str(params.get(key) or "")
            if have and have != want:
                raise EngineError(f"{key} mismatch: db={have!r} config={want!r}. Refuse to start.")
        params["routing_policy"] = self.routing_policy

    # ----------------------------
    # Transaction core
    # ----------------------------

    def now(self) -> int:
        return int(self._clock())

    def _transact(self, op: str, fn: Callable[[Json, int], Json]) -> Json:
        with self._lock:
            # Whole-state copy: each write costs O(ledger size).
            work = copy.deepcopy(self.state)
            now = self.now()
            try:
                out = fn(work, now)
            except LedgerError as e:
                metrics.inc_counter(f"{op}_rejected_total")
                log_event(log, "op_rejected", level=logging.WARNING, op=op, code=e.code, reason=e.reason)
                raise

            new_events = work.pop("events", [])
            if self._store is not None:
                self._store.commit(work, new_events)
            else:
                self._events.extend(new_events)
            self.state = work

            metrics.inc_counter(f"{op}_total")
            metrics.set_gauge("certificate_supply", certificates.total_supply(work))
            return out

    # ----------------------------
    # Mutations
    # ----------------------------

    @staticmethod
    def _consume_holder_nonce(st: Json, holder: str, nonce: Optional[int]) -> None:
        # A null holder skips the check; the operation itself rejects it.
        who = norm_address(holder)
        if nonce is not None and who is not None:
            consume_nonce(st, holder_scope(who), nonce)

    def deposit(
        self,
        depositor: str,
        amount: int,
        dynamic_overrides: Optional[Sequence[Optional[str]]] = None,
        *,
        nonce: Optional[int] = None,
    ) -> int:
        """Fan a deposit out to the eight recipients. Returns certificates minted."""
        out = self.deposit_receipt(depositor, amount, dynamic_overrides, nonce=nonce)
        return int(out["certificates"])

    def deposit_receipt(
        self,
        depositor: str,
        amount: int,
        dynamic_overrides: Optional[Sequence[Optional[str]]] = None,
        *,
        nonce: Optional[int] = None,
    ) -> Json:
        def _apply(st: Json, now: int) -> Json:
            self._consume_holder_nonce(st, depositor, nonce)
            return apply_deposit(
                st,
                depositor=depositor,
                amount=amount,
                now=now,
                operator=self.operator,
                routing_policy=self.routing_policy,
                dynamic_overrides=dynamic_overrides,
            )

        return self._transact("deposit", _apply)

    def redeem(self, holder: str, amount: int, *, nonce: Optional[int] = None) -> int:
        """Redeem certificates for the penalized payout. Returns the payout."""
        out = self.redeem_receipt(holder, amount, nonce=nonce)
        return int(out["payout"])

    def redeem_receipt(self, holder: str, amount: int, *, nonce: Optional[int] = None) -> Json:
        def _apply(st: Json, now: int) -> Json:
            self._consume_holder_nonce(st, holder, nonce)
            return apply_redeem(
                st,
                holder=holder,
                amount=amount,
                now=now,
                operator=self.operator,
                reserve=self.settlement_reserve,
            )

        return self._transact("redeem", _apply)

    def transfer(self, sender: str, recipient: str, amount: int, *, nonce: Optional[int] = None) -> Json:
        def _apply(st: Json, now: int) -> Json:
            self._consume_holder_nonce(st, sender, nonce)
            out = certificates.transfer(st, sender, recipient, amount, now=now)
            append_event(st, "certificate_transfer", sender=out["from"], recipient=out["to"], amount=out["amount"], timestamp=now)
            return out

        return self._transact("transfer", _apply)

    def approve(self, owner: str, spender: str, amount: int) -> Json:
        return self._transact("approve", lambda st, now: certificates.approve(st, owner, spender, amount))

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> Json:
        def _apply(st: Json, now: int) -> Json:
            out = certificates.transfer_from(st, spender, sender, recipient, amount, now=now)
            append_event(
                st,
                "certificate_transfer",
                sender=out["from"],
                recipient=out["to"],
                amount=out["amount"],
                spender=out["spender"],
                timestamp=now,
            )
            return out

        return self._transact("transfer_from", _apply)

    def update_dynamic_recipients(
        self,
        caller: str,
        level1: Optional[str],
        level2: Optional[str],
        level3: Optional[str],
        *,
        nonce: Optional[int] = None,
    ) -> Json:
        """Replace the three dynamic recipients.

        ``nonce``, when given, must exceed the last accepted admin nonce; signed
        API requests use it to reject replays.
        """

        def _apply(st: Json, now: int) -> Json:
            if nonce is not None:
                consume_nonce(st, ADMIN_SCOPE, nonce)
            return update_dynamic_recipients(
                st,
                caller=caller,
                level1=level1,
                level2=level2,
                level3=level3,
                is_authorized=self._is_authorized,
                now=now,
            )

        out = self._transact("update_dynamic_recipients", _apply)
        log_event(log, "dynamic_recipients_updated", caller=out["caller"], recipients=out["recipients"])
        return out

    def register_holder_key(self, caller: str, holder: str, pubkey: str, *, nonce: Optional[int] = None) -> Json:
        """Bind the ed25519 key that must sign ``holder``'s API requests."""

        def _apply(st: Json, now: int) -> Json:
            if nonce is not None:
                consume_nonce(st, ADMIN_SCOPE, nonce)
            return register_holder_key(
                st, caller=caller, holder=holder, pubkey=pubkey, is_authorized=self._is_authorized, now=now
            )

        out = self._transact("register_holder_key", _apply)
        log_event(log, "holder_key_registered", holder=out["holder"], rotated=out["rotated"])
        return out

    # Asset-side helpers: funding and authorizing the external balances the
    # engine draws on. Deployments backed by a real asset network do this
    # out of band.

    def fund_assets(self, account: str, amount: int) -> Json:
        return self._transact("fund_assets", lambda st, now: assets.credit(st, account, amount))

    def approve_assets(self, owner: str, amount: int) -> Json:
        """Let the engine's operator spend ``amount`` of ``owner``'s asset."""
        return self._transact("approve_assets", lambda st, now: assets.approve(st, owner, self.operator, amount))

    def freeze_asset_account(self, account: str, frozen: bool = True) -> Json:
        return self._transact("freeze_asset_account", lambda st, now: assets.set_frozen(st, account, frozen))

    # ----------------------------
    # Queries
    # ----------------------------

    def view(self) -> LedgerView:
        with self._lock:
            return LedgerView.from_ledger(self.state)

    def wallets(self) -> Json:
        with self._lock:
            return wallet_snapshot(self.state)

    def balance_of(self, holder: str) -> int:
        with self._lock:
            return certificates.balance_of(self.state, holder)

    def epoch_of(self, holder: str) -> int:
        with self._lock:
            return epoch_of(self.state, holder)

    def total_supply(self) -> int:
        with self._lock:
            return certificates.total_supply(self.state)

    def asset_balance_of(self, account: str) -> int:
        with self._lock:
            return assets.balance_of(self.state, account)

    def holder(self, holder: str) -> Json:
        with self._lock:
            return {
                "holder": holder,
                "balance": certificates.balance_of(self.state, holder),
                "epoch": epoch_of(self.state, holder),
                "asset_balance": assets.balance_of(self.state, holder),
                "nonce": last_nonce(self.state, holder_scope(holder)),
            }

    def holder_key(self, holder: str) -> Optional[str]:
        with self._lock:
            return holder_key(self.state, holder)

    def last_nonce(self, holder: Optional[str] = None) -> int:
        """Last accepted nonce for ``holder``, or for admin actions when omitted."""
        with self._lock:
            return last_nonce(self.state, ADMIN_SCOPE if holder is None else holder_scope(holder))

    def preview(self, holder: str, amount: int) -> PenaltyResult:
        """Penalty and payout for redeeming ``amount`` now, without mutating state."""
        with self._lock:
            return calculate_penalty(epoch=epoch_of(self.state, holder), amount=amount, now=self.now())

    def events(self, *, since: int = 0, limit: int = 100) -> List[Json]:
        lim = max(1, min(int(limit), 1000))
        with self._lock:
            if self._store is not None:
                return self._store.events(since=int(since), limit=lim)
            return [copy.deepcopy(e) for e in self._events if int(e["seq"]) > int(since)][:lim]


__all__ = ["EngineError", "SettlementEngine"]
