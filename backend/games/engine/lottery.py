from datetime import datetime


def flatten_tickets(participants):
    """
    participants: iterable of (user_id, ticket_numbers)
    Returns [(ticket_number, user_id), ...] ordered by ticket number.
    """
    tickets = []
    for user_id, numbers in participants:
        for number in numbers or []:
            tickets.append((number, user_id))
    tickets.sort()
    return tickets


def draw_ticket(tickets, rng):
    """Uniformly pick one ticket; every ticket has the same chance."""
    if not tickets:
        raise ValueError("No tickets to draw from")
    return tickets[rng.randrange(len(tickets))]


def total_pot(ticket_price: int, tickets_sold: int) -> int:
    return ticket_price * tickets_sold


def can_draw(participant_count: int, min_players: int) -> bool:
    return participant_count >= min_players


def is_expired(expires_at, now) -> bool:
    if not expires_at:
        return False
    if isinstance(expires_at, str):
        expires_at = datetime.fromisoformat(expires_at)
    return now >= expires_at


def refund_amounts(participants, ticket_price: int):
    """{user_id: points to give back} for a cancelled draw."""
    return {
        user_id: ticket_price * len(numbers or [])
        for user_id, numbers in participants
        if numbers
    }
