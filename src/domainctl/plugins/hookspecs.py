"""Pluggy hook specifications for domainctl.

Four notification hooks are called synchronously after the change they
describe has committed. One ``firstresult`` hook performs the external
payout of a treasury withdrawal and runs before the balance is zeroed.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("domainctl")
hookimpl = pluggy.HookimplMarker("domainctl")


class DomainctlHookSpec:
    """Hook specifications for the domainctl plugin system."""

    @hookspec
    def post_register_domain(self, name: str, controller: str, payment: int) -> None:
        """Called after a top-level domain is registered."""

    @hookspec
    def post_register_subdomain(
        self,
        parent: str,
        name: str,
        controller: str,
        payment: int,
    ) -> None:
        """Called after a subdomain is registered."""

    @hookspec
    def post_set_fee(self, old_fee: int, new_fee: int) -> None:
        """Called after the registration fee changes."""

    @hookspec
    def post_withdraw(self, recipient: str, amount: int, receipt: str) -> None:
        """Called after the treasury balance has been paid out."""

    @hookspec(firstresult=True)
    def transfer_funds(self, recipient: str, amount: int) -> str | None:
        """Pay *amount* base units to *recipient*; return a receipt.

        Raise to abort the withdrawal: the balance stays untouched. Return
        None to defer to the next implementation (or the built-in ledger).
        """
