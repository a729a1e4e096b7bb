"""Transfer gate: deadline check, transfer allowance and transfer execution."""

import logging
import uuid
from datetime import datetime
from typing import Optional

from .config import get_transfer_limits
from .errors import TransferError
from .schemas import FantasyTeam, Gameweek, Transaction
from .store import LeagueStore
from .utils import ensure_utc, utc_now

logger = logging.getLogger('fsl.transfers')


def relevant_gameweek(store: LeagueStore, team: FantasyTeam) -> Optional[Gameweek]:
    """
    Gameweek whose deadline governs the team's transfers.

    The team's own current gameweek if it exists and isn't finished yet,
    otherwise the gameweek flagged current, otherwise the one flagged next.
    A team that joined mid-season keeps the default current_gameweek of 1
    until the next finalization, so a finished record defers to the calendar.
    """
    gameweek = store.find_gameweek(team.current_gameweek)
    if gameweek is not None and not gameweek.is_finished:
        return gameweek
    gameweeks = store.gameweeks()
    current = next((gw for gw in gameweeks if gw.is_current), None)
    if current is not None:
        return current
    return next((gw for gw in gameweeks if gw.is_next), None)


def transfers_allowed(store: LeagueStore, fantasy_team_id: str, now: Optional[datetime] = None) -> bool:
    """True until the deadline of the team's gameweek has passed."""
    now = ensure_utc(now or utc_now())
    team = store.get_team(fantasy_team_id)
    gameweek = relevant_gameweek(store, team)
    if gameweek is None or gameweek.deadline_time is None:
        return True
    return now < gameweek.deadline_time


def available_transfers(team: FantasyTeam) -> int:
    """Free transfers left this gameweek: min(base + banked, max) - made, floored at 0."""
    base, maximum, _ = get_transfer_limits()
    total_available = min(base + team.transfers_banked, maximum)
    return max(total_available - team.transfers_made_this_gw, 0)


def transfers_remaining(store: LeagueStore, fantasy_team_id: str) -> int:
    """Free transfers left for a stored team."""
    return available_transfers(store.get_team(fantasy_team_id))


def execute_transfer(
    store: LeagueStore,
    fantasy_team_id: str,
    outgoing_player_id: str,
    incoming_player_id: str,
    roster_id: str,
    now: Optional[datetime] = None,
) -> list[Transaction]:
    """
    Swap one squad player for another.

    The roster slot takes the incoming player at their current price, the
    price difference comes out of the budget, one transfer is used and a
    transfer_out / transfer_in pair is logged against the team's gameweek.
    Transfers for the same team are serialized.

    Args:
        store: League store
        fantasy_team_id: Team making the transfer
        outgoing_player_id: Player leaving the squad
        incoming_player_id: Player joining the squad
        roster_id: Slot currently holding the outgoing player
        now: Time of the request (default: now)

    Returns:
        The two recorded transactions (out, in)

    Raises:
        NotFoundError: If the team, slot or either player doesn't exist
        TransferError: If the deadline passed, no transfers remain, the budget
            would go negative or the swap is not a like-for-like squad change
    """
    now = ensure_utc(now or utc_now())

    with store.team_lock(fantasy_team_id), store.transaction():
        team = store.get_team(fantasy_team_id)
        slot = store.get_roster_slot(roster_id)
        outgoing = store.get_player(outgoing_player_id)
        incoming = store.get_player(incoming_player_id)

        if not transfers_allowed(store, fantasy_team_id, now):
            raise TransferError('deadline_passed', 'Transfers are not allowed at this time')

        if available_transfers(team) <= 0:
            raise TransferError('no_transfers_remaining', 'No transfers remaining')

        if slot.fantasy_team_id != fantasy_team_id or slot.player_id != outgoing_player_id:
            raise TransferError(
                'slot_mismatch',
                f'Roster slot {roster_id} does not hold {outgoing_player_id} for {fantasy_team_id}',
            )

        if any(s.player_id == incoming_player_id for s in store.roster_for_team(fantasy_team_id)):
            raise TransferError(
                'already_in_squad', f'{incoming.name} is already in {team.team_name}'
            )

        if incoming.position != outgoing.position:
            raise TransferError(
                'position_mismatch',
                f'Cannot replace {outgoing.position} {outgoing.name} with {incoming.position} {incoming.name}',
            )

        price_difference = round(incoming.price - outgoing.price, 1)
        new_budget = round(team.budget_remaining - price_difference, 1)
        if new_budget < 0:
            raise TransferError(
                'insufficient_budget',
                f'Insufficient budget: need {price_difference:.1f}, have {team.budget_remaining:.1f}',
            )

        slot.player_id = incoming.player_id
        slot.purchase_price = incoming.price
        slot.gameweek_added = team.current_gameweek
        team.budget_remaining = new_budget
        team.transfers_made_this_gw += 1

        transactions = [
            Transaction(
                transaction_id=str(uuid.uuid4()),
                fantasy_team_id=fantasy_team_id,
                player_id=outgoing.player_id,
                transaction_type='transfer_out',
                gameweek=team.current_gameweek,
                price=outgoing.price,
                created_at=now,
            ),
            Transaction(
                transaction_id=str(uuid.uuid4()),
                fantasy_team_id=fantasy_team_id,
                player_id=incoming.player_id,
                transaction_type='transfer_in',
                gameweek=team.current_gameweek,
                price=incoming.price,
                created_at=now,
            ),
        ]
        for transaction in transactions:
            store.add_transaction(transaction)

    logger.info(
        f'Transfer completed for {fantasy_team_id}: {outgoing.name} -> {incoming.name} '
        f'(budget {new_budget:.1f}, {available_transfers(team)} transfer(s) left)'
    )
    return transactions
